"""Detect known-bad variant configurations in block documents."""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel

from blocklint.kernel.scanner import format_path, iter_nodes
from blocklint._internal.lines import find_text_line


_VARIANT_MARKERS = ("multivariate", "flags")


class AntiPattern(BaseModel):
    """A configuration that is valid but certainly unintended."""
    type: Literal["dead-code", "lazy-multivariate"]
    document: str
    path: str
    message: str
    line: Optional[int] = None


def _is_variant_selector(identifier: Any) -> bool:
    return isinstance(identifier, str) and any(m in identifier for m in _VARIANT_MARKERS)


def _identifier(node: Any, discriminator: str) -> Optional[str]:
    if isinstance(node, dict) and isinstance(node.get(discriminator), str):
        return node[discriminator]
    return None


def detect_antipatterns(document: Any, name: str, content: str, discriminator: str = "__resolveType") -> List[AntiPattern]:
    """Anti-patterns in one decoded document.

    Args:
        document: Decoded JSON.
        name: Document name reported on each finding.
        content: Raw text, for line lookups.
    """
    found: List[AntiPattern] = []
    for segments, node in iter_nodes(document):
        if not _is_variant_selector(node.get(discriminator)):
            continue
        variants = node.get("variants")
        if not isinstance(variants, list):
            continue

        base = segments + ("variants",)
        for index, variant in enumerate(variants):
            if not isinstance(variant, dict):
                continue
            rule = _identifier(variant.get("rule"), discriminator)
            if rule is not None and "never" in rule.lower():
                found.append(
                    AntiPattern(
                        type="dead-code",
                        document=name,
                        path=format_path(base + (f"[{index}]",)),
                        message="Variant with 'never' rule is dead code and will never execute",
                        line=find_text_line(content, "never"),
                    )
                )

            value = variant.get("value")
            wrapper = _identifier(value, discriminator)
            if wrapper is not None and "Lazy" in wrapper:
                if _is_variant_selector(_identifier(value.get("section"), discriminator)):
                    found.append(
                        AntiPattern(
                            type="lazy-multivariate",
                            document=name,
                            path=format_path(base + (f"[{index}]", "value")),
                            message=(
                                "Lazy wrapping multivariate is an anti-pattern. "
                                "Multivariate should wrap Lazy, not the other way around."
                            ),
                            line=find_text_line(content, "Lazy"),
                        )
                    )
    return found
