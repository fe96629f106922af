"""Cooperative pause/resume/cancel control for a running scan."""

from __future__ import annotations

import logging
import queue
from typing import Callable

from diskscan.models.control import Cancel, ControlCommand, Pause, Refresh, Resume, RunState

log = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]

DEFAULT_CAPACITY = 16
DEFAULT_POLL_INTERVAL = 0.05  # seconds


class ControlCoordinator:
    """Feeds control commands from other threads into the traversal loop.

    Producers call :meth:`send` from any thread.  The traversal thread is
    the only one that applies commands, and it does so inside
    :meth:`check_control`, so the run state never changes between two
    checkpoints.  Every applied command is acknowledged through
    ``on_status`` before the checkpoint returns.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_status: StatusCallback | None = None,
    ) -> None:
        self._queue: queue.Queue[ControlCommand] = queue.Queue(maxsize=capacity)
        self._poll_interval = poll_interval
        self._state = RunState.RUNNING
        self.on_status = on_status
        self.refresh_requests: list[str] = []

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def cancelled(self) -> bool:
        return self._state is RunState.CANCELLED

    @property
    def paused(self) -> bool:
        return self._state is RunState.PAUSED

    def send(self, command: ControlCommand, block: bool = True, timeout: float | None = None) -> bool:
        """Queue a command for the traversal thread.

        With ``block=True`` a full queue makes the caller wait for room.
        Otherwise the command is dropped and False is returned.
        """
        try:
            self._queue.put(command, block=block, timeout=timeout)
        except queue.Full:
            log.warning("Control queue full, dropping %s", type(command).__name__.lower())
            return False
        return True

    def reset(self) -> None:
        """Return to the running state for a new scan invocation."""
        self._state = RunState.RUNNING
        self.refresh_requests.clear()

    def check_control(self) -> bool:
        """Apply pending commands and report whether traversal may continue.

        A pause consumed here, or one already in effect, blocks the caller,
        waking at most every ``poll_interval`` seconds to apply commands as
        they arrive, until resumed or cancelled.

        Commands that would not change the state, a pause while paused or a
        resume while running, are dropped without an acknowledgement.
        After a cancel nothing more is read from the queue.
        """
        if self.cancelled:
            return False

        self.process_commands()
        while self.paused:
            try:
                command = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            self._apply(command)
            self.process_commands()
        return not self.cancelled

    def process_commands(self) -> None:
        """Drain and apply every queued command without blocking."""
        while not self.cancelled:
            try:
                command = self._queue.get_nowait()
            except queue.Empty:
                return
            self._apply(command)

    def _apply(self, command: ControlCommand) -> None:
        if self.cancelled:
            return
        match command:
            case Pause():
                if self._state is RunState.PAUSED:
                    log.debug("Ignoring pause, scan already paused")
                    return
                self._state = RunState.PAUSED
                self._acknowledge("paused")
            case Resume():
                if self._state is RunState.RUNNING:
                    log.debug("Ignoring resume, scan not paused")
                    return
                self._state = RunState.RUNNING
                self._acknowledge("resumed")
            case Cancel():
                self._state = RunState.CANCELLED
                self._acknowledge("cancelled")
            case Refresh(path=path):
                self.refresh_requests.append(path)
                self._acknowledge(f"refreshing:{path}")

    def _acknowledge(self, status: str) -> None:
        log.debug("Control status: %s", status)
        if self.on_status:
            self.on_status(status)
