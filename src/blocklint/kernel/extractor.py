"""Extract a component's props schema from its TypeScript source.

The props type is found, in order, from:

1. a re-export ``export { default } from "<spec>"`` (followed into the target),
2. the first parameter of the default-exported function,
3. a declaration named ``Props`` (interface first, then type alias).

Anything the resolver cannot model degrades to ``AnySchema`` rather than
failing; ``extract`` itself returns None instead of raising.
"""

import json
import logging
import os
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from tree_sitter import Node

from blocklint.kernel.schema import (
    SPECIAL_TYPE_NAMES,
    AnySchema,
    ArraySchema,
    ObjectSchema,
    PrimitiveSchema,
    Schema,
    SpecialSchema,
    UnionSchema,
    with_optional,
)
from blocklint.kernel.sources import FileSystemReader, PathLike, SourceReader
from blocklint.kernel.ts_source import SourceFile, parse_source


logger = logging.getLogger(__name__)

IMPORT_PROBE_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")
PROPS_DECLARATION = "Props"

_import_map_cache: Dict[str, Dict[str, str]] = {}


def load_import_map(project_root: PathLike, reader: Optional[SourceReader] = None) -> Dict[str, str]:
    """Alias table from the ``imports`` object of ``<project_root>/deno.json``.

    A missing or malformed file yields an empty table. Results are cached per
    project root; see ``clear_import_map_cache``.
    """
    root = os.path.normpath(os.fspath(project_root))
    if root in _import_map_cache:
        return _import_map_cache[root]

    reader = reader or FileSystemReader()
    config_path = os.path.join(root, "deno.json")
    imports: Dict[str, str] = {}
    try:
        data = json.loads(reader.read_text(config_path))
    except FileNotFoundError:
        logger.debug("No deno.json in %s; import aliases disabled", root)
    except (OSError, ValueError) as e:
        logger.warning("Could not read import map %s: %s", config_path, e)
    else:
        raw = data.get("imports") if isinstance(data, dict) else None
        if isinstance(raw, dict):
            imports = {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)}

    _import_map_cache[root] = imports
    return imports


def clear_import_map_cache() -> None:
    _import_map_cache.clear()


class TypeExtractor:
    """Props-schema extractor bound to one project.

    Args:
        project_root: Base for alias targets in the import map. Without it,
            only relative imports resolve.
        reader: File access; defaults to the local file system.
        import_map: Alias table; loaded from ``deno.json`` when omitted.
        cache: Memoize results per file path.
    """

    def __init__(
        self,
        project_root: Optional[PathLike] = None,
        reader: Optional[SourceReader] = None,
        import_map: Optional[Dict[str, str]] = None,
        cache: bool = True,
    ):
        self.project_root = os.path.normpath(os.fspath(project_root)) if project_root is not None else None
        self.reader = reader or FileSystemReader()
        self._import_map = import_map
        self._cache: Optional[Dict[str, Optional[Schema]]] = {} if cache else None

    @property
    def import_map(self) -> Dict[str, str]:
        if self._import_map is None:
            self._import_map = load_import_map(self.project_root, self.reader) if self.project_root else {}
        return self._import_map

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def extract(self, file_path: PathLike) -> Optional[Schema]:
        """Props schema of the component defined in ``file_path``, or None."""
        path = os.path.normpath(os.fspath(file_path))
        if self._cache is not None and path in self._cache:
            return self._cache[path]
        schema = self._extract(path, frozenset())
        if self._cache is not None:
            self._cache[path] = schema
        return schema

    def _extract(self, path: str, chain: FrozenSet[str]) -> Optional[Schema]:
        if path in chain:
            logger.warning("Re-export cycle through %s", path)
            return None
        try:
            text = self.reader.read_text(path)
        except FileNotFoundError:
            logger.debug("Component source not found: %s", path)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

        try:
            source = parse_source(text, path)
            target = source.reexported_default_source()
            if target is not None:
                resolved = self.resolve_import_path(target, path)
                logger.debug("%s re-exports default from %s", path, resolved)
                return self._extract(resolved, chain | {path})
            return _extract_from_source(source)
        except Exception:
            logger.warning("Failed to extract props from %s", path, exc_info=True)
            return None

    def resolve_import_path(self, import_path: str, current_file: PathLike) -> str:
        """Map a module specifier used in ``current_file`` to a file path.

        Relative specifiers resolve against the importing file's directory.
        Otherwise the longest matching alias wins, provided its target is a
        relative path inside the project; any other alias target (URL, npm:,
        jsr:) stops the alias search. Unresolved specifiers fall back to the
        importing file's directory. Extensions are probed in the order
        ``.tsx``, ``.ts``, ``.jsx``, ``.js`` when the path itself is absent.
        """
        base_dir = os.path.dirname(os.fspath(current_file))
        if import_path.startswith(("./", "../")):
            return self._probe(os.path.join(base_dir, import_path))

        if self.project_root is not None:
            for alias in sorted(self.import_map, key=len, reverse=True):
                if not import_path.startswith(alias):
                    continue
                target = self.import_map[alias]
                if target.startswith(("./", "../")):
                    return self._probe(os.path.join(self.project_root, target, import_path[len(alias):]))
                break

        return self._probe(os.path.join(base_dir, import_path))

    def _probe(self, path: str) -> str:
        path = os.path.normpath(path)
        if self.reader.exists(path):
            return path
        for ext in IMPORT_PROBE_EXTENSIONS:
            if self.reader.exists(path + ext):
                return path + ext
        return path


def _extract_from_source(source: SourceFile) -> Optional[Schema]:
    resolver = _TypeResolver(source)

    function = source.default_export_function()
    if function is not None:
        type_node = source.first_parameter_type(function)
        if type_node is not None:
            return resolver.resolve(type_node)

    interface = source.find_interface(PROPS_DECLARATION)
    if interface is not None:
        return resolver.build_interface(interface)

    alias = source.find_type_alias(PROPS_DECLARATION)
    if alias is not None:
        value = alias.child_by_field_name("value")
        if value is not None:
            return resolver.resolve(value)
    return None


class _TypeResolver:
    """Maps type nodes of one source file to schemas.

    ``guard`` holds the text of every type expression on the current
    resolution path; meeting one again resolves to any. It is extended by
    copy, so sibling branches never see each other's entries.
    """

    def __init__(self, source: SourceFile):
        self.source = source

    def resolve(self, node: Node, optional: bool = False, guard: FrozenSet[str] = frozenset()) -> Schema:
        key = self.source.text(node)
        if key in guard:
            return AnySchema(optional=optional)
        guard = guard | {key}

        kind = node.type
        if kind == "predefined_type":
            name = key.strip()
            if name in ("string", "number", "boolean"):
                return PrimitiveSchema(type=name, optional=optional)
            return AnySchema(optional=optional)

        if kind == "literal_type":
            inner = node.named_children[0] if node.named_children else None
            if inner is not None and inner.type == "null":
                return PrimitiveSchema(type="null", optional=optional)
            return AnySchema(optional=optional)

        if kind == "array_type":
            element = _first_type(node)
            element_schema = self.resolve(element, False, guard) if element is not None else None
            return ArraySchema(element_type=element_schema, optional=optional)

        if kind == "union_type":
            members = tuple(self.resolve(m, False, guard) for m in self.source.union_members(node))
            return UnionSchema(members=members, optional=optional)

        if kind == "object_type":
            properties, ignored = self._member_schemas(node, guard)
            return ObjectSchema(properties=properties, ignored=ignored, optional=optional)

        if kind == "parenthesized_type":
            inner = _first_type(node)
            if inner is not None:
                return self.resolve(inner, optional, guard)
            return AnySchema(optional=optional)

        if kind in ("type_identifier", "nested_type_identifier"):
            return self._reference(key, [], optional, guard)

        if kind == "generic_type":
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return AnySchema(optional=optional)
            return self._reference(self.source.text(name_node), self.source.type_arguments(node), optional, guard)

        return AnySchema(optional=optional)

    def build_interface(
        self,
        declaration: Node,
        optional: bool = False,
        guard: FrozenSet[str] = frozenset(),
    ) -> ObjectSchema:
        """Object schema of an interface: inherited members first, then its own."""
        name_node = declaration.child_by_field_name("name")
        key = "interface " + (self.source.text(name_node) if name_node is not None else "")
        if key in guard:
            return ObjectSchema(optional=optional)
        guard = guard | {key}

        properties: Dict[str, Schema] = {}
        ignored: Set[str] = set()
        for base_name in self.source.heritage_names(declaration):
            base = self.source.find_interface(base_name)
            if base is not None:
                inherited = self.build_interface(base, False, guard)
                properties.update(inherited.properties)
                ignored.update(inherited.ignored)
        own, own_ignored = self._member_schemas(declaration, guard)
        properties.update(own)
        ignored.update(own_ignored)
        ignored.difference_update(properties)
        return ObjectSchema(properties=properties, ignored=frozenset(ignored), optional=optional)

    def _member_schemas(
        self, container: Node, guard: FrozenSet[str]
    ) -> Tuple[Dict[str, Schema], FrozenSet[str]]:
        """Declared members of ``container`` and the names marked @ignore."""
        properties: Dict[str, Schema] = {}
        ignored: Set[str] = set()
        for member in self.source.members(container):
            if member.ignored:
                ignored.add(member.name)
                continue
            if member.type_node is None:
                properties[member.name] = AnySchema(optional=member.optional)
            else:
                properties[member.name] = self.resolve(member.type_node, member.optional, guard)
        return properties, frozenset(ignored)

    def _reference(self, name: str, args: List[Node], optional: bool, guard: FrozenSet[str]) -> Schema:
        if name in SPECIAL_TYPE_NAMES:
            return SpecialSchema(tag=name, optional=optional)

        if name in ("Omit", "Pick"):
            if len(args) < 2:
                return AnySchema(optional=optional)
            base = self.resolve(args[0], False, guard)
            if not isinstance(base, ObjectSchema):
                return with_optional(base, optional)
            keys = self.source.literal_string_keys(args[1])
            if name == "Omit":
                properties = {k: v for k, v in base.properties.items() if k not in keys}
            else:
                properties = {k: base.properties[k] for k in keys if k in base.properties}
            return ObjectSchema(properties=properties, ignored=base.ignored, optional=optional)

        if name == "Partial":
            if not args:
                return AnySchema(optional=optional)
            base = self.resolve(args[0], False, guard)
            if not isinstance(base, ObjectSchema):
                return with_optional(base, optional)
            properties = {k: with_optional(v, True) for k, v in base.properties.items()}
            return ObjectSchema(properties=properties, ignored=base.ignored, optional=optional)

        if name == "Array" and len(args) == 1:
            return ArraySchema(element_type=self.resolve(args[0], False, guard), optional=optional)

        interface = self.source.find_interface(name)
        if interface is not None:
            return self.build_interface(interface, optional, guard)

        alias = self.source.find_type_alias(name)
        if alias is not None:
            value = alias.child_by_field_name("value")
            if value is not None:
                return self.resolve(value, optional, guard)

        return AnySchema(optional=optional)


def _first_type(node: Node) -> Optional[Node]:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None
