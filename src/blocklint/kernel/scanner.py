"""Walk decoded JSON documents for component references."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from blocklint.kernel.references import ReferenceKind, ReferenceResolver
from blocklint.kernel.validator import DISCRIMINATOR


Segments = Tuple[str, ...]


@dataclass(frozen=True)
class Occurrence:
    """A node referencing a component, with its properties minus the discriminator."""
    path: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FoundReference:
    identifier: str
    kind: ReferenceKind
    segments: Segments
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return format_path(self.segments)


def format_path(segments: Sequence[str]) -> str:
    """Render ``("a", "b", "[2]", "c")`` as ``a.b[2].c``; the empty path is ``root``."""
    parts: List[str] = []
    for segment in segments:
        if segment.startswith("[") or not parts:
            parts.append(segment)
        else:
            parts.append("." + segment)
    return "".join(parts) or "root"


def _properties(node: Dict[str, Any], discriminator: str) -> Dict[str, Any]:
    return {k: v for k, v in node.items() if k != discriminator}


def find_occurrences(document: Any, target: str, discriminator: str = DISCRIMINATOR) -> List[Occurrence]:
    """Every node whose discriminator equals ``target``, in document order.

    A matching node is a leaf of the search: references nested inside its own
    properties are not reported.
    """
    found: List[Occurrence] = []

    def visit(node: Any, segments: Segments) -> None:
        if isinstance(node, dict):
            if node.get(discriminator) == target:
                found.append(Occurrence(path=format_path(segments), properties=_properties(node, discriminator)))
                return
            for key, value in node.items():
                if key != discriminator:
                    visit(value, segments + (key,))
        elif isinstance(node, list):
            for index, item in enumerate(node):
                visit(item, segments + (f"[{index}]",))

    visit(document, ())
    return found


def find_references(
    document: Any,
    resolver: ReferenceResolver,
    discriminator: str = DISCRIMINATOR,
) -> List[FoundReference]:
    """Every local or saved-block reference in ``document``.

    External references are not reported, but their properties are still
    searched, since they commonly wrap local components.
    """
    found: List[FoundReference] = []

    def visit(node: Any, segments: Segments) -> None:
        if isinstance(node, dict):
            identifier = node.get(discriminator)
            if isinstance(identifier, str):
                kind = resolver.classify(identifier)
                if kind is not ReferenceKind.EXTERNAL:
                    found.append(
                        FoundReference(
                            identifier=identifier,
                            kind=kind,
                            segments=segments,
                            properties=_properties(node, discriminator),
                        )
                    )
            for key, value in node.items():
                if key != discriminator:
                    visit(value, segments + (key,))
        elif isinstance(node, list):
            for index, item in enumerate(node):
                visit(item, segments + (f"[{index}]",))

    visit(document, ())
    return found


def iter_nodes(document: Any) -> Iterator[Tuple[Segments, Dict[str, Any]]]:
    """Yield ``(segments, node)`` for every object in ``document``, depth first."""
    stack: List[Tuple[Segments, Any]] = [((), document)]
    while stack:
        segments, node = stack.pop()
        if isinstance(node, dict):
            yield segments, node
            children = [(segments + (key,), value) for key, value in node.items()]
        elif isinstance(node, list):
            children = [(segments + (f"[{i}]",), item) for i, item in enumerate(node)]
        else:
            continue
        stack.extend(reversed(children))
