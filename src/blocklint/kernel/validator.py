"""Structural validation of JSON values against a props schema.

``validate_value`` never raises on bad input; every mismatch becomes a
``ValidationIssue``. Kinds in messages use JavaScript ``typeof`` names since
the documents are authored for a JavaScript runtime (``null`` reports as
``object``).
"""

from typing import Any, List

from pydantic import BaseModel

from blocklint.codes import IssueCode, Severity
from blocklint.kernel.schema import (
    AnySchema,
    ArraySchema,
    ObjectSchema,
    PrimitiveSchema,
    Schema,
    SpecialSchema,
    UnionSchema,
    describe,
)


DISCRIMINATOR = "__resolveType"
RESERVED_PREFIX = "__"


class _Missing:
    """Marker for a property that is absent from its parent object."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class ValidationIssue(BaseModel):
    """A single validation finding."""
    path: str  # e.g. "items[0].title"; "" is the value itself
    message: str
    severity: Severity = Severity.ERROR
    code: IssueCode = IssueCode.TYPE_MISMATCH


def kind_of(value: Any) -> str:
    """JSON kind of a decoded value, as reported in messages."""
    if value is None:
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _truthy(value: Any) -> bool:
    # Empty containers are truthy in JavaScript
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def _error(path: str, message: str, code: IssueCode = IssueCode.TYPE_MISMATCH) -> ValidationIssue:
    return ValidationIssue(path=path, message=message, severity=Severity.ERROR, code=code)


def validate_value(
    value: Any,
    schema: Schema,
    path: str = "",
    ignore_unknown_properties: bool = False,
) -> List[ValidationIssue]:
    """Validate ``value`` against ``schema``.

    Args:
        value: Decoded JSON value, or ``MISSING`` when the property is absent.
        schema: Expected shape.
        path: Location of ``value`` in the document, used to prefix issue paths.
        ignore_unknown_properties: When False, object keys the schema does not
            declare produce a warning each.

    Returns:
        Issues in traversal order (declared properties first, then unknown keys).
    """
    if value is MISSING:
        if schema.optional:
            return []
        return [_error(path, "required property missing", IssueCode.MISSING_PROPERTY)]

    if isinstance(schema, AnySchema):
        return []
    if isinstance(schema, PrimitiveSchema):
        return _validate_primitive(value, schema, path)
    if isinstance(schema, ArraySchema):
        return _validate_array(value, schema, path, ignore_unknown_properties)
    if isinstance(schema, ObjectSchema):
        return _validate_object(value, schema, path, ignore_unknown_properties)
    if isinstance(schema, UnionSchema):
        return _validate_union(value, schema, path, ignore_unknown_properties)
    if isinstance(schema, SpecialSchema):
        return _validate_special(value, schema, path)
    return []


def _validate_primitive(value: Any, schema: PrimitiveSchema, path: str) -> List[ValidationIssue]:
    if schema.type == "null":
        if value is None:
            return []
        return [_error(path, f"expected null, got {kind_of(value)}")]
    actual = kind_of(value)
    if actual != schema.type:
        return [_error(path, f"expected {schema.type}, got {actual}")]
    return []


def _validate_array(
    value: Any,
    schema: ArraySchema,
    path: str,
    ignore_unknown_properties: bool,
) -> List[ValidationIssue]:
    if not isinstance(value, list):
        # A deferred reference is resolved to a list at runtime
        if isinstance(value, dict) and DISCRIMINATOR in value:
            return []
        return [_error(path, f"expected array, got {kind_of(value)}")]
    if schema.element_type is None:
        return []
    issues: List[ValidationIssue] = []
    for index, item in enumerate(value):
        issues.extend(
            validate_value(item, schema.element_type, f"{path}[{index}]", ignore_unknown_properties)
        )
    return issues


def _validate_object(
    value: Any,
    schema: ObjectSchema,
    path: str,
    ignore_unknown_properties: bool,
) -> List[ValidationIssue]:
    if not isinstance(value, dict):
        return [_error(path, f"expected object, got {kind_of(value)}")]

    issues: List[ValidationIssue] = []
    for name, prop_schema in schema.properties.items():
        issues.extend(
            validate_value(
                value.get(name, MISSING),
                prop_schema,
                _join(path, name),
                ignore_unknown_properties,
            )
        )

    if not ignore_unknown_properties:
        for key in value:
            if key.startswith(RESERVED_PREFIX) or key in schema.properties or key in schema.ignored:
                continue
            issues.append(
                ValidationIssue(
                    path=_join(path, key),
                    message="property not defined in type (can be removed)",
                    severity=Severity.WARNING,
                    code=IssueCode.UNKNOWN_PROPERTY,
                )
            )
    return issues


def _validate_union(
    value: Any,
    schema: UnionSchema,
    path: str,
    ignore_unknown_properties: bool,
) -> List[ValidationIssue]:
    if not schema.members:
        return []
    for member in schema.members:
        if not validate_value(value, member, path, ignore_unknown_properties):
            return []
    names = " | ".join(describe(member) for member in schema.members)
    return [_error(path, f"value does not match any type in union ({names})", IssueCode.UNION_MISMATCH)]


def _validate_special(value: Any, schema: SpecialSchema, path: str) -> List[ValidationIssue]:
    tag = schema.tag
    code = IssueCode.SPECIAL_TYPE_MISMATCH

    if tag in ("ImageWidget", "RichText", "Color", "DateWidget", "DateTimeWidget"):
        if isinstance(value, str):
            return []
        return [_error(path, f"expected {tag} (string), got {kind_of(value)}", code)]

    if tag in ("Product", "ProductListingPage", "ProductDetailsPage"):
        if value is None or not isinstance(value, (dict, list)):
            return [_error(path, f"expected {tag} (object), got {kind_of(value)}", code)]
        # An array passes the object check but has none of the fields
        fields = value if isinstance(value, dict) else {}
        if tag == "Product":
            if not (_truthy(fields.get("productID")) or _truthy(fields.get("sku"))):
                return [_error(_join(path, "productID"), "Product must have productID or sku", code)]
        elif tag == "ProductListingPage":
            if not isinstance(fields.get("products"), list):
                return [_error(path, "ProductListingPage must have products array", code)]
        elif not _truthy(fields.get("product")):
            return [_error(path, "ProductDetailsPage must have product", code)]
        return []

    # Unrecognized tags are accepted
    return []
