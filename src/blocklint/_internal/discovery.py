"""Locate component sources and block documents on disk."""

from pathlib import Path
from typing import Iterable, List, Tuple


def find_component_files(project_root: Path, roots: Iterable[Tuple[str, Tuple[str, ...]]]) -> List[Path]:
    """Component source files under each ``(directory, extensions)`` root, sorted."""
    found = set()
    for directory, extensions in roots:
        base = project_root / directory
        if not base.is_dir():
            continue
        for path in base.rglob("*"):
            if path.is_file() and path.name.endswith(tuple(extensions)):
                found.add(path)
    return sorted(found)


def find_documents(blocks_dir: Path) -> List[Path]:
    """JSON documents under ``blocks_dir``, sorted."""
    if not blocks_dir.is_dir():
        return []
    return sorted(p for p in blocks_dir.rglob("*.json") if p.is_file())


def relative_posix(path: Path, base: Path) -> str:
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()
