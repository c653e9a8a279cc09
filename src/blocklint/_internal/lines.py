"""Line lookups in raw document text."""

import re
from typing import Optional


def find_reference_line(content: str, identifier: str, occurrence: int = 0, discriminator: str = "__resolveType") -> Optional[int]:
    """1-based line of the ``occurrence``-th ``"<discriminator>": "<identifier>"`` pair."""
    pattern = re.compile(r'"%s"\s*:\s*"%s"' % (re.escape(discriminator), re.escape(identifier)))
    for index, match in enumerate(pattern.finditer(content)):
        if index == occurrence:
            return content.count("\n", 0, match.start()) + 1
    return None


def find_text_line(content: str, needle: str) -> Optional[int]:
    """1-based line of the first line containing ``needle``."""
    for number, line in enumerate(content.splitlines(), start=1):
        if needle in line:
            return number
    return None
