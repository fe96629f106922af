"""Line-delimited JSON encoding and buffered delivery of scan events."""

from __future__ import annotations

import json
import logging
from typing import Callable, TextIO

from diskscan.models.scan_event import EntryEvent, ScanEvent

log = logging.getLogger(__name__)

EventSink = Callable[[ScanEvent], None]

DEFAULT_FLUSH_BATCH_SIZE = 256


def encode_event(event: ScanEvent) -> str | None:
    """Encode an event as a single JSON line (without the newline).

    Returns None when the event cannot be serialized, e.g. text holding
    lone surrogates.
    """
    try:
        line = json.dumps(event.to_dict(), ensure_ascii=False, separators=(",", ":"))
        line.encode("utf-8")
    except (TypeError, ValueError) as exc:
        log.warning("Dropping %s event that could not be encoded: %s", event.type, exc)
        return None
    return line


class EventWriter:
    """Buffers encoded events and hands them off in ordered batches.

    Entry events are held until ``flush_batch_size`` lines are pending.
    Any other event flushes immediately together with everything queued
    before it, so acknowledgements and the terminal event are never delayed.
    Subclasses implement :meth:`_deliver`.
    """

    def __init__(self, flush_batch_size: int = DEFAULT_FLUSH_BATCH_SIZE) -> None:
        self.flush_batch_size = max(1, flush_batch_size)
        self._pending: list[str] = []

    def write(self, event: ScanEvent) -> None:
        line = encode_event(event)
        if line is None:
            return
        self._pending.append(line)
        if not isinstance(event, EntryEvent) or len(self._pending) >= self.flush_batch_size:
            self.flush()

    def flush(self) -> None:
        if not self._pending:
            return
        lines, self._pending = self._pending, []
        self._deliver(lines)

    def _deliver(self, lines: list[str]) -> None:
        raise NotImplementedError


class StreamEventWriter(EventWriter):
    """Writes one event per line to a text stream such as stdout."""

    def __init__(self, stream: TextIO, flush_batch_size: int = DEFAULT_FLUSH_BATCH_SIZE) -> None:
        super().__init__(flush_batch_size)
        self._stream = stream

    def _deliver(self, lines: list[str]) -> None:
        self._stream.write("".join(f"{line}\n" for line in lines))
        self._stream.flush()
