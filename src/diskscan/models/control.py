"""Control commands and run states for an in-flight scan."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_REFRESH_PREFIX = "refresh:"


class RunState(enum.Enum):
    RUNNING = "running"
    PAUSED = "paused"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class Pause:
    pass


@dataclass(frozen=True, slots=True)
class Resume:
    pass


@dataclass(frozen=True, slots=True)
class Cancel:
    pass


@dataclass(frozen=True, slots=True)
class Refresh:
    """Request a rescan of ``path`` by whoever drives the scanner."""

    path: str


ControlCommand = Pause | Resume | Cancel | Refresh


def parse_command(line: str) -> ControlCommand | None:
    """Parse one command line (``pause``, ``resume``, ``cancel``, ``refresh:<path>``).

    Returns None for anything unrecognized.
    """
    text = line.strip()
    match text:
        case "pause":
            return Pause()
        case "resume":
            return Resume()
        case "cancel":
            return Cancel()
    if text.startswith(_REFRESH_PREFIX):
        return Refresh(text[len(_REFRESH_PREFIX):])
    return None
