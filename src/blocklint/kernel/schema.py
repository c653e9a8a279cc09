"""Schema model: the type shapes a component accepts as props.

A schema is a tree of frozen pydantic models joined as a discriminated union
on ``kind``. Every node carries an ``optional`` flag describing whether the
value may be absent where it appears.
"""

from __future__ import annotations

from typing import Annotated, Dict, FrozenSet, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


SPECIAL_TYPE_NAMES = (
    "ImageWidget",
    "RichText",
    "Color",
    "DateWidget",
    "DateTimeWidget",
    "Product",
    "ProductListingPage",
    "ProductDetailsPage",
)


class PrimitiveSchema(BaseModel):
    """A string, number, boolean or null value."""
    kind: Literal["primitive"] = "primitive"
    type: Literal["string", "number", "boolean", "null"]
    optional: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class ArraySchema(BaseModel):
    """A list whose elements all match ``element_type`` (any element when None)."""
    kind: Literal["array"] = "array"
    element_type: Optional[Schema] = None
    optional: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class ObjectSchema(BaseModel):
    """A record with named properties, in declaration order."""
    kind: Literal["object"] = "object"
    properties: Dict[str, Schema] = Field(default_factory=dict)
    ignored: FrozenSet[str] = frozenset()  # @ignore members: accepted, never validated
    optional: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class UnionSchema(BaseModel):
    """A value matching at least one member."""
    kind: Literal["union"] = "union"
    members: Tuple[Schema, ...] = ()
    optional: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class SpecialSchema(BaseModel):
    """A named platform type with its own validation rule (see SPECIAL_TYPE_NAMES)."""
    kind: Literal["special"] = "special"
    tag: str
    optional: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class AnySchema(BaseModel):
    """Accepts every value. Also the fallback for type shapes we cannot model."""
    kind: Literal["any"] = "any"
    optional: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


Schema = Annotated[
    Union[PrimitiveSchema, ArraySchema, ObjectSchema, UnionSchema, SpecialSchema, AnySchema],
    Field(discriminator="kind"),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()
UnionSchema.model_rebuild()


def with_optional(schema: Schema, optional: bool) -> Schema:
    """Return ``schema`` with its optional flag set to ``optional``."""
    if schema.optional == optional:
        return schema
    return schema.model_copy(update={"optional": optional})


def describe(schema: Schema) -> str:
    """Short name of a schema as shown in union mismatch messages."""
    if isinstance(schema, PrimitiveSchema):
        return schema.type
    if isinstance(schema, SpecialSchema):
        return schema.tag
    return schema.kind
