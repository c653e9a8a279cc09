"""Tests for identifier classification and file mapping."""

import pytest

from blocklint.kernel.references import (
    BlockStore,
    ReferenceKind,
    ReferenceResolver,
    block_name_to_file_name,
    file_name_to_block_name,
)
from blocklint.kernel.sources import MemoryReader


@pytest.fixture
def resolver():
    return ReferenceResolver()


@pytest.mark.parametrize(
    "identifier, kind",
    [
        ("site/sections/Header.tsx", ReferenceKind.LOCAL),
        ("site/loaders/search.ts", ReferenceKind.LOCAL),
        ("website/sections/Rendering/Lazy.tsx", ReferenceKind.EXTERNAL),
        ("resolved", ReferenceKind.EXTERNAL),
        ("vtex/loaders/intelligentSearch/productList.ts", ReferenceKind.EXTERNAL),
        ("Header - 01", ReferenceKind.SAVED_BLOCK),
        ("Footer", ReferenceKind.SAVED_BLOCK),
    ],
)
def test_classify(resolver, identifier, kind):
    assert resolver.classify(identifier) is kind
    assert resolver.is_saved_block(identifier) == (kind is ReferenceKind.SAVED_BLOCK)


def test_local_candidates_prefer_components_dir(resolver):
    assert resolver.to_candidate_paths("site/sections/Footer.tsx") == [
        "sections/sections/Footer.tsx",
        "sections/Footer.tsx",
    ]


def test_local_candidates_probe_extensions(resolver):
    assert resolver.to_candidate_paths("site/Footer") == [
        "sections/Footer.tsx",
        "sections/Footer.ts",
        "Footer.tsx",
        "Footer.ts",
    ]


def test_saved_block_candidate_is_encoded_block_file(resolver):
    assert resolver.to_candidate_paths("Header Main") == [".deco/blocks/Header%20Main.json"]


def test_external_has_no_candidates(resolver):
    assert resolver.to_candidate_paths("website/sections/Rendering/Lazy.tsx") == []


def test_locate_returns_first_existing_candidate(resolver):
    reader = MemoryReader({"/p/sections/Footer.tsx": ""})
    assert resolver.locate("site/sections/Footer.tsx", "/p", reader) == "/p/sections/Footer.tsx"
    assert resolver.locate("site/sections/Nope.tsx", "/p", reader) is None


def test_identifier_from_path(resolver):
    assert resolver.identifier_from_path("/p/sections/Product/Shelf.tsx", "/p") == "site/sections/Product/Shelf.tsx"
    assert resolver.identifier_from_path("loaders/search.ts") == "site/loaders/search.ts"


def test_block_file_names_round_trip():
    assert block_name_to_file_name("Header / Main") == "Header%20%2F%20Main.json"
    assert file_name_to_block_name("Header%20%2F%20Main.json") == "Header / Main"
    assert block_name_to_file_name("pages-Home-(1)") == "pages-Home-(1).json"


def test_block_store_reads_encoded_file():
    reader = MemoryReader({"/p/.deco/blocks/My%20Footer.json": '{"a": 1}'})
    store = BlockStore("/p/.deco/blocks", reader)
    assert store.read("My Footer") == '{"a": 1}'
    assert store.read("Other") is None
