"""Tests for locating references inside JSON documents."""

from blocklint.kernel.references import ReferenceKind, ReferenceResolver
from blocklint.kernel.scanner import find_occurrences, find_references, format_path, iter_nodes


PAGE = {
    "name": "Home",
    "sections": [
        {"__resolveType": "site/sections/Hero.tsx", "title": "Hi"},
        {
            "__resolveType": "website/sections/Rendering/Lazy.tsx",
            "section": {"__resolveType": "site/sections/Hero.tsx", "title": "Lazy hi"},
        },
        {"__resolveType": "Footer"},
    ],
    "seo": {"__resolveType": "resolved"},
}


def test_format_path():
    assert format_path(()) == "root"
    assert format_path(("sections", "[2]", "title")) == "sections[2].title"
    assert format_path(("[0]", "a")) == "[0].a"


def test_find_occurrences_reports_paths_and_properties():
    found = find_occurrences(PAGE, "site/sections/Hero.tsx")
    assert [o.path for o in found] == ["sections[0]", "sections[1].section"]
    assert found[0].properties == {"title": "Hi"}


def test_matching_node_is_a_leaf():
    document = {
        "__resolveType": "site/sections/Box.tsx",
        "child": {"__resolveType": "site/sections/Box.tsx"},
    }
    found = find_occurrences(document, "site/sections/Box.tsx")
    assert [o.path for o in found] == ["root"]


def test_find_occurrences_without_matches():
    assert find_occurrences([1, "a", None], "site/sections/Hero.tsx") == []


def test_find_references_skips_external_but_scans_inside():
    found = find_references(PAGE, ReferenceResolver())
    assert [(r.identifier, r.kind, r.path) for r in found] == [
        ("site/sections/Hero.tsx", ReferenceKind.LOCAL, "sections[0]"),
        ("site/sections/Hero.tsx", ReferenceKind.LOCAL, "sections[1].section"),
        ("Footer", ReferenceKind.SAVED_BLOCK, "sections[2]"),
    ]
    assert found[2].properties == {}


def test_iter_nodes_visits_every_object_in_order():
    paths = [format_path(segments) for segments, _ in iter_nodes(PAGE)]
    assert paths == [
        "root",
        "sections[0]",
        "sections[1]",
        "sections[1].section",
        "sections[2]",
        "seo",
    ]
