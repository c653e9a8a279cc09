"""Find component files imported from code.

A component that no document references may still be used directly by other
modules (``import X from "site/sections/X.tsx"``); such files are not unused.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Set


logger = logging.getLogger(__name__)

IMPORT_PATTERN = re.compile(r"""(?:from\s+["']([^"']+)["']|import\s+["']([^"']+)["'])""")
SKIP_DIRS = frozenset({"node_modules", ".deco", "_fresh", ".git"})
_SOURCE_SUFFIXES = (".ts", ".tsx")
_STRIP_EXTENSION = re.compile(r"\.(tsx?|jsx?)$")


@dataclass
class ImportAnalysis:
    imported: Set[str] = field(default_factory=set)  # project-relative, extension stripped
    import_count: int = 0
    files_analyzed: int = 0

    def is_imported(self, relative_path: str) -> bool:
        return _STRIP_EXTENSION.sub("", relative_path.replace("\\", "/")) in self.imported


def analyze_imports(project_root: Path, local_prefix: str = "site/") -> ImportAnalysis:
    """Collect every ``<local_prefix>...`` module imported by a source file of the project."""
    analysis = ImportAnalysis()
    for dirpath, dirnames, filenames in os.walk(project_root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for filename in sorted(filenames):
            if not filename.endswith(_SOURCE_SUFFIXES):
                continue
            path = Path(dirpath) / filename
            analysis.files_analyzed += 1
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Failed to analyze imports in %s: %s", path, e)
                continue
            for match in IMPORT_PATTERN.finditer(content):
                specifier = match.group(1) or match.group(2)
                if not specifier.startswith(local_prefix):
                    continue
                analysis.imported.add(_STRIP_EXTENSION.sub("", specifier[len(local_prefix):]))
                analysis.import_count += 1
    logger.debug(
        "Import analysis: %d file(s), %d local import(s)", analysis.files_analyzed, analysis.import_count
    )
    return analysis
