"""Tree-sitter queries over TypeScript / TSX component sources.

Only the handful of syntactic questions the type extractor asks are answered
here; the extractor never touches tree-sitter nodes beyond ``.type`` and the
helpers below.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree


logger = logging.getLogger(__name__)

_TSX_SUFFIXES = (".tsx", ".jsx")

FUNCTION_NODE_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
})

_PARAMETER_NODE_TYPES = ("required_parameter", "optional_parameter")
_EXPORT_ALIAS = re.compile(r"\s+as\s+")
_IGNORE_TAG = re.compile(r"@ignore\b")


@lru_cache(maxsize=None)
def _language(tsx: bool) -> Language:
    factory = tree_sitter_typescript.language_tsx if tsx else tree_sitter_typescript.language_typescript
    return Language(factory())


@dataclass(frozen=True)
class Member:
    """A property signature of an interface or object type literal."""
    name: str
    optional: bool
    type_node: Optional[Node]  # None when the member has no annotation
    ignored: bool  # carries an @ignore doc tag


@dataclass
class SourceFile:
    """A parsed component source file."""
    path: str
    data: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def walk(self) -> Iterator[Node]:
        """Yield every named node in document order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.named_children))

    # -- exports ---------------------------------------------------------

    def reexported_default_source(self) -> Optional[str]:
        """Module specifier of ``export { default } from "<spec>"``, if present."""
        for node in self.root.named_children:
            if node.type != "export_statement":
                continue
            source = node.child_by_field_name("source")
            if source is None:
                continue
            for clause in node.named_children:
                if clause.type != "export_clause":
                    continue
                for spec in clause.named_children:
                    if spec.type != "export_specifier":
                        continue
                    exported = _EXPORT_ALIAS.split(self.text(spec).strip())[-1]
                    if _unquote(exported) == "default":
                        return _unquote(self.text(source))
        return None

    def default_export_function(self) -> Optional[Node]:
        """Function-like node exported as default, following ``export default <ident>``."""
        for node in self.root.named_children:
            if node.type != "export_statement" or not _has_token(node, "default"):
                continue
            declaration = node.child_by_field_name("declaration")
            if declaration is not None:
                if declaration.type in FUNCTION_NODE_TYPES:
                    return declaration
                continue
            value = node.child_by_field_name("value")
            if value is None:
                continue
            value = _unwrap_parens(value)
            if value.type in FUNCTION_NODE_TYPES:
                return value
            if value.type == "identifier":
                return self.find_function(self.text(value))
        return None

    def find_function(self, name: str) -> Optional[Node]:
        """Function declaration or function-valued variable named ``name``.

        The first declaration with that name wins; a variable initialized with
        anything other than a function yields None.
        """
        for node in self.walk():
            if node.type in ("function_declaration", "generator_function_declaration"):
                name_node = node.child_by_field_name("name")
                if name_node is not None and self.text(name_node) == name:
                    return node
            elif node.type == "variable_declarator":
                name_node = node.child_by_field_name("name")
                if name_node is None or self.text(name_node) != name:
                    continue
                value = node.child_by_field_name("value")
                if value is None:
                    return None
                value = _unwrap_parens(value)
                return value if value.type in FUNCTION_NODE_TYPES else None
        return None

    @staticmethod
    def first_parameter_type(function: Node) -> Optional[Node]:
        """Type node annotating the first parameter of ``function``."""
        params = function.child_by_field_name("parameters")
        if params is None:
            return None
        for param in params.named_children:
            if param.type in _PARAMETER_NODE_TYPES:
                return _annotation_type(param.child_by_field_name("type"))
            if param.type != "comment":
                return None
        return None

    # -- declarations ----------------------------------------------------

    def find_interface(self, name: str) -> Optional[Node]:
        return self._find_declaration("interface_declaration", name)

    def find_type_alias(self, name: str) -> Optional[Node]:
        return self._find_declaration("type_alias_declaration", name)

    def _find_declaration(self, node_type: str, name: str) -> Optional[Node]:
        for node in self.walk():
            if node.type != node_type:
                continue
            name_node = node.child_by_field_name("name")
            if name_node is not None and self.text(name_node) == name:
                return node
        return None

    def heritage_names(self, interface: Node) -> List[str]:
        """Names of the interfaces ``interface`` extends, in source order."""
        names: List[str] = []
        for clause in interface.named_children:
            if clause.type != "extends_type_clause":
                continue
            for base in clause.named_children:
                if base.type == "generic_type" and base.child_by_field_name("name") is not None:
                    base = base.child_by_field_name("name")
                if base.type in ("type_identifier", "nested_type_identifier"):
                    names.append(self.text(base))
        return names

    def members(self, container: Node) -> List[Member]:
        """Property signatures of an interface declaration or object type."""
        body = container.child_by_field_name("body") if container.type == "interface_declaration" else container
        if body is None:
            return []
        result: List[Member] = []
        for child in body.named_children:
            if child.type != "property_signature":
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            result.append(
                Member(
                    name=_unquote(self.text(name_node)),
                    optional=_has_token(child, "?"),
                    type_node=_annotation_type(child.child_by_field_name("type")),
                    ignored=self._has_ignore_tag(child),
                )
            )
        return result

    def _has_ignore_tag(self, member: Node) -> bool:
        sibling = member.prev_sibling
        while sibling is not None and sibling.type in ("comment", ";", ","):
            if sibling.type == "comment":
                comment = self.text(sibling)
                if comment.startswith("/**") and _IGNORE_TAG.search(comment):
                    return True
            sibling = sibling.prev_sibling
        return False

    # -- types -----------------------------------------------------------

    def union_members(self, node: Node) -> List[Node]:
        """Flatten a left-nested ``a | b | c`` union into its member types."""
        members: List[Node] = []
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type == "union_type":
                members.extend(self.union_members(child))
            else:
                members.append(child)
        return members

    def literal_string_keys(self, node: Node) -> List[str]:
        """String literal members of a key union such as ``"a" | "b"``."""
        if node.type == "union_type":
            keys: List[str] = []
            for member in self.union_members(node):
                keys.extend(self.literal_string_keys(member))
            return keys
        if node.type == "literal_type":
            inner = node.named_children[0] if node.named_children else None
            if inner is not None and inner.type == "string":
                return [_unquote(self.text(inner))]
        return []

    @staticmethod
    def type_arguments(node: Node) -> List[Node]:
        args = node.child_by_field_name("type_arguments")
        if args is None:
            return []
        return [arg for arg in args.named_children if arg.type != "comment"]


def parse_source(text: str, path: str = "") -> SourceFile:
    """Parse component source text; the grammar is chosen from the file suffix."""
    parser = Parser()
    parser.language = _language(path.endswith(_TSX_SUFFIXES))
    data = text.encode("utf-8")
    tree = parser.parse(data)
    if tree.root_node.has_error:
        logger.debug("Syntax errors in %s; continuing with a partial tree", path or "<memory>")
    return SourceFile(path=path, data=data, tree=tree)


def _has_token(node: Node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def _annotation_type(annotation: Optional[Node]) -> Optional[Node]:
    if annotation is None:
        return None
    for child in annotation.named_children:
        if child.type != "comment":
            return child
    return None


def _unwrap_parens(node: Node) -> Node:
    while node.type == "parenthesized_expression" and node.named_children:
        node = node.named_children[0]
    return node


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
        return text[1:-1]
    return text
