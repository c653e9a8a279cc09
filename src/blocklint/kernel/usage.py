"""Track which identifiers a run has seen referenced."""

from typing import Iterable, List, Set


class UsageIndex:
    """Set of referenced identifiers, compared against everything that exists."""

    def __init__(self):
        self.used: Set[str] = set()

    def mark(self, identifier: str) -> None:
        self.used.add(identifier)

    def mark_all(self, identifiers: Iterable[str]) -> None:
        self.used.update(identifiers)

    def unused(self, known: Iterable[str], excluded: Iterable[str] = ()) -> List[str]:
        """Sorted members of ``known`` never marked, minus ``excluded``."""
        skip = set(excluded)
        return sorted(i for i in set(known) - self.used if i not in skip)
