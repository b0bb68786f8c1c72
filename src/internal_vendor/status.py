# SPDX-License-Identifier: MIT
"""Package status values and list ordering.

Statuses are reported most severe first, so that unused, internal and external
packages show up before the mundane local and standard library entries:

    u github.com/old/dependency
    i example.com/me/project/internal/foo
    e example.com/foo
    l example.com/me/project
    s fmt
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ListStatus(Enum):
    """Classification of an import path relative to the current project."""

    UNKNOWN = "unknown"
    MISSING = "missing"
    STD = "std"
    LOCAL = "local"
    EXTERNAL = "external"
    INTERNAL = "internal"
    UNUSED = "unused"

    @property
    def code(self) -> str:
        """One letter code used in list output."""
        return STATUS_CODES[self]

    @property
    def severity(self) -> int:
        """Rank used for ordering; higher sorts first."""
        return STATUS_SEVERITY[self]

    def __str__(self) -> str:
        return self.code


STATUS_CODES: dict[ListStatus, str] = {
    ListStatus.UNKNOWN: "?",
    ListStatus.MISSING: "m",
    ListStatus.STD: "s",
    ListStatus.LOCAL: "l",
    ListStatus.EXTERNAL: "e",
    ListStatus.INTERNAL: "i",
    ListStatus.UNUSED: "u",
}

# Explicit ordering table. Enum declaration order is not used for sorting.
STATUS_SEVERITY: dict[ListStatus, int] = {
    ListStatus.UNKNOWN: 0,
    ListStatus.MISSING: 1,
    ListStatus.STD: 2,
    ListStatus.LOCAL: 3,
    ListStatus.EXTERNAL: 4,
    ListStatus.INTERNAL: 5,
    ListStatus.UNUSED: 6,
}


@dataclass(frozen=True)
class ListItem:
    """A single row of list output.

    Attributes:
        status: Classification of the import path
        path: The import path
    """

    status: ListStatus
    path: str

    def __str__(self) -> str:
        return f"{self.status.code} {self.path}"


def list_item_sort_key(item: ListItem) -> tuple[int, str]:
    """Sort key: severity descending, then import path ascending."""
    return (-item.status.severity, item.path)


def sort_list_items(items: Iterable[ListItem]) -> list[ListItem]:
    """Return items ordered by severity (highest first), then by path."""
    return sorted(items, key=list_item_sort_key)


def is_sorted(items: list[ListItem]) -> bool:
    """Check that every adjacent pair respects the list ordering."""
    for a, b in zip(items, items[1:]):
        if a.status.severity > b.status.severity:
            continue
        if a.status.severity == b.status.severity and a.path <= b.path:
            continue
        return False
    return True
