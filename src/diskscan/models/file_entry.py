"""Filesystem entry and subtree totals dataclasses."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(slots=True)
class FileEntry:
    """Single filesystem node observed during a scan.

    For directories ``size`` and ``item_count`` cover the recursively
    scanned contents; the directory node itself is not counted.
    """

    path: str
    name: str
    size: int
    is_dir: bool
    is_symlink: bool
    modified: int | None
    item_count: int
    file_type: str

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(slots=True)
class ScanTotals:
    """Aggregate size and item count of a subtree."""

    total_size: int = 0
    total_items: int = 0

    def add(self, size: int, items: int) -> None:
        self.total_size += size
        self.total_items += items
