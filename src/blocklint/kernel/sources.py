"""Read-only access to project files.

The extractor and the document validator only ever read text and probe for
existence, so both go through a ``SourceReader``. ``FileSystemReader`` is the
real implementation; ``MemoryReader`` backs virtual projects in tests and
editor integrations.
"""

import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Union


PathLike = Union[str, os.PathLike]


class SourceReader(Protocol):
    """Minimal file access used by the analysis kernel."""

    def read_text(self, path: PathLike) -> str:
        """Return the file's text. Raises FileNotFoundError if absent."""
        ...

    def exists(self, path: PathLike) -> bool:
        """True if ``path`` names a readable file."""
        ...


class FileSystemReader:
    """Reads UTF-8 files from disk, caching their text by absolute path."""

    def __init__(self, cache: bool = True):
        self._cache: Optional[Dict[str, str]] = {} if cache else None

    def read_text(self, path: PathLike) -> str:
        key = os.path.abspath(path)
        if self._cache is not None and key in self._cache:
            return self._cache[key]
        text = Path(key).read_text(encoding="utf-8")
        if self._cache is not None:
            self._cache[key] = text
        return text

    def exists(self, path: PathLike) -> bool:
        return os.path.isfile(path)

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()


class MemoryReader:
    """Serves files from a ``{path: text}`` mapping."""

    def __init__(self, files: Optional[Mapping[PathLike, str]] = None):
        self.files: Dict[str, str] = {}
        for path, text in (files or {}).items():
            self.add(path, text)

    def add(self, path: PathLike, text: str) -> None:
        self.files[os.path.normpath(os.fspath(path))] = text

    def read_text(self, path: PathLike) -> str:
        key = os.path.normpath(os.fspath(path))
        try:
            return self.files[key]
        except KeyError:
            raise FileNotFoundError(f"No such file: {key}") from None

    def exists(self, path: PathLike) -> bool:
        return os.path.normpath(os.fspath(path)) in self.files
