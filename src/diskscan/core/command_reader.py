"""Background reader turning command lines into control commands."""

from __future__ import annotations

import logging
import threading
from typing import TextIO

from diskscan.core.control import ControlCoordinator
from diskscan.models.control import parse_command

log = logging.getLogger(__name__)


class CommandReader:
    """Reads newline-delimited commands from a stream on a daemon thread."""

    def __init__(self, stream: TextIO, coordinator: ControlCoordinator) -> None:
        self._stream = stream
        self._coordinator = coordinator
        self._thread = threading.Thread(target=self._run, name="diskscan-commands", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def _run(self) -> None:
        for line in self._stream:
            command = parse_command(line)
            if command is None:
                log.debug("Ignoring unrecognized command: %r", line.rstrip("\n"))
                continue
            self._coordinator.send(command)
        log.debug("Command stream closed")
