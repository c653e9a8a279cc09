"""Pytest configuration for tests.

No sys.path hacks - tests should import from the installed blocklint package.
"""

import json
from pathlib import Path

import pytest

from blocklint.kernel.extractor import clear_import_map_cache


@pytest.fixture(autouse=True)
def _fresh_import_maps():
    """Import maps are cached per project root; tests reuse virtual roots."""
    clear_import_map_cache()
    yield
    clear_import_map_cache()


class ProjectBuilder:
    """Writes a minimal site project (sources, deno.json, blocks) under a temp dir."""

    def __init__(self, root: Path):
        self.root = root
        self.blocks = root / ".deco" / "blocks"
        self.blocks.mkdir(parents=True)

    def source(self, relative: str, text: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def block(self, name: str, data) -> Path:
        path = self.blocks / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = data if isinstance(data, str) else json.dumps(data, indent=2)
        path.write_text(text, encoding="utf-8")
        return path

    def deno_json(self, imports: dict) -> Path:
        return self.source("deno.json", json.dumps({"imports": imports}, indent=2))


@pytest.fixture
def project(tmp_path):
    """A fresh project directory with an empty ``.deco/blocks``."""
    return ProjectBuilder(tmp_path / "site")
