"""diskscan data models."""

from diskscan.models.control import Cancel, ControlCommand, Pause, Refresh, Resume, RunState, parse_command
from diskscan.models.file_entry import FileEntry, ScanTotals
from diskscan.models.scan_event import (
    DoneEvent,
    EntryEvent,
    ErrorEvent,
    FolderCompleteEvent,
    ScanEvent,
    StatusEvent,
)

__all__ = [
    "Cancel",
    "ControlCommand",
    "DoneEvent",
    "EntryEvent",
    "ErrorEvent",
    "FileEntry",
    "FolderCompleteEvent",
    "Pause",
    "Refresh",
    "Resume",
    "RunState",
    "ScanEvent",
    "ScanTotals",
    "StatusEvent",
    "parse_command",
]
