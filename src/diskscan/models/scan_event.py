"""Scan event variants streamed to the host application.

Every event serializes to a flat record tagged by ``type``.  Entry records
carry the :class:`FileEntry` fields inline::

    {"type": "entry", "path": "/a/b.txt", "name": "b.txt", ...}
    {"type": "complete", "path": "/a", "total_size": 10}
    {"type": "done", "total_size": 10, "total_items": 1}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from diskscan.models.file_entry import FileEntry


@dataclass(slots=True)
class EntryEvent:
    """One observed filesystem node."""

    type: ClassVar[str] = "entry"

    entry: FileEntry

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, **self.entry.to_dict()}


@dataclass(slots=True)
class FolderCompleteEvent:
    """All children of a directory have been processed."""

    type: ClassVar[str] = "complete"

    path: str
    total_size: int

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, "path": self.path, "total_size": self.total_size}


@dataclass(slots=True)
class ErrorEvent:
    """Non-fatal failure tied to one path."""

    type: ClassVar[str] = "error"

    path: str
    message: str

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, "path": self.path, "message": self.message}


@dataclass(slots=True)
class StatusEvent:
    """Acknowledgement of a control command."""

    type: ClassVar[str] = "status"

    status: str

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, "status": self.status}


@dataclass(slots=True)
class DoneEvent:
    """Terminal event of a scan invocation."""

    type: ClassVar[str] = "done"

    total_size: int
    total_items: int

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, "total_size": self.total_size, "total_items": self.total_items}


ScanEvent = EntryEvent | FolderCompleteEvent | ErrorEvent | StatusEvent | DoneEvent
