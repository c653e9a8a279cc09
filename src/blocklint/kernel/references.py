"""Classify component identifiers and map them to files.

An identifier (the value of ``__resolveType``) names one of:

- a local component (``site/sections/Header.tsx``), resolved to a source file,
- an external component from another app or the ``resolved`` sentinel,
  which is never validated,
- a saved block, a bare name whose content lives in the blocks directory.
"""

import os
from enum import Enum
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote, unquote

from blocklint.kernel.sources import PathLike, SourceReader


# Characters encodeURIComponent leaves unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"


class ReferenceKind(str, Enum):
    LOCAL = "local"
    EXTERNAL = "external"
    SAVED_BLOCK = "saved_block"


def block_name_to_file_name(name: str) -> str:
    """``Header Navigation`` -> ``Header%20Navigation.json``."""
    return quote(name, safe=_URI_COMPONENT_SAFE) + ".json"


def file_name_to_block_name(file_name: str) -> str:
    stem = file_name[:-len(".json")] if file_name.endswith(".json") else file_name
    return unquote(stem)


class ReferenceResolver:
    """Naming conventions of one project.

    Args:
        local_prefix: Prefix of identifiers owned by this project.
        foreign_prefixes: Prefixes of identifiers owned by other projects.
        sentinel: Identifier marking an already-resolved value.
        components_dir: Conventional subdirectory tried first for local ids.
        source_extensions: Extensions probed, in order, for local ids.
        blocks_dir: Directory (relative to the project root) holding saved blocks.
    """

    def __init__(
        self,
        local_prefix: str = "site/",
        foreign_prefixes: Sequence[str] = ("website/",),
        sentinel: str = "resolved",
        components_dir: str = "sections",
        source_extensions: Sequence[str] = (".tsx", ".ts"),
        blocks_dir: str = ".deco/blocks",
    ):
        self.local_prefix = local_prefix
        self.foreign_prefixes: Tuple[str, ...] = tuple(foreign_prefixes)
        self.sentinel = sentinel
        self.components_dir = components_dir
        self.source_extensions: Tuple[str, ...] = tuple(source_extensions)
        self.blocks_dir = blocks_dir

    def classify(self, identifier: str) -> ReferenceKind:
        if identifier == self.sentinel:
            return ReferenceKind.EXTERNAL
        if identifier.startswith(self.local_prefix):
            return ReferenceKind.LOCAL
        if identifier.startswith(self.foreign_prefixes):
            return ReferenceKind.EXTERNAL
        # A direct file reference into another app, e.g. "apps/x/loaders/y.ts"
        if identifier.rsplit("/", 1)[-1].endswith(self.source_extensions):
            return ReferenceKind.EXTERNAL
        return ReferenceKind.SAVED_BLOCK

    def is_saved_block(self, identifier: str) -> bool:
        return self.classify(identifier) is ReferenceKind.SAVED_BLOCK

    def to_candidate_paths(self, identifier: str) -> List[str]:
        """Project-relative files that may hold ``identifier``, in probe order.

        Local ids try ``<components_dir>/<rest>`` before ``<rest>``, each with
        every source extension when ``<rest>`` has none. A saved block maps to
        its block file. External ids have no candidates.
        """
        kind = self.classify(identifier)
        if kind is ReferenceKind.SAVED_BLOCK:
            return [self.block_path(identifier)]
        if kind is ReferenceKind.EXTERNAL:
            return []

        rest = identifier[len(self.local_prefix):]
        bases = [f"{self.components_dir}/{rest}", rest]
        if rest.endswith(self.source_extensions):
            return bases
        return [base + ext for base in bases for ext in self.source_extensions]

    def locate(self, identifier: str, project_root: PathLike, reader: SourceReader) -> Optional[str]:
        """First existing candidate file of ``identifier``, as a full path."""
        for candidate in self.to_candidate_paths(identifier):
            path = os.path.normpath(os.path.join(os.fspath(project_root), candidate))
            if reader.exists(path):
                return path
        return None

    def identifier_from_path(self, path: PathLike, project_root: Optional[PathLike] = None) -> str:
        """Identifier under which documents reference the component at ``path``."""
        if project_root is not None:
            path = os.path.relpath(os.fspath(path), os.fspath(project_root))
        return self.local_prefix + os.fspath(path).replace(os.sep, "/")

    def block_path(self, name: str) -> str:
        return f"{self.blocks_dir}/{block_name_to_file_name(name)}"


class BlockStore:
    """Loads saved-block documents of one project."""

    def __init__(self, blocks_dir: PathLike, reader: SourceReader):
        self.blocks_dir = os.path.normpath(os.fspath(blocks_dir))
        self.reader = reader

    def path_for(self, name: str) -> str:
        return os.path.join(self.blocks_dir, block_name_to_file_name(name))

    def read(self, name: str) -> Optional[str]:
        """Raw JSON text of saved block ``name``, or None when it does not exist.

        Raises:
            OSError, UnicodeDecodeError: If the file exists but cannot be read.
        """
        path = self.path_for(name)
        if not self.reader.exists(path):
            return None
        return self.reader.read_text(path)
