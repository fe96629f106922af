"""D-Bus service exposing the scanner to desktop host applications.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "as" and "b" are D-Bus protocol types, not Python syntax.

Scans run on a dedicated thread; the event loop thread only queues
control commands and relays batched events as signals.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal
from dbus_next import BusType

from diskscan.core.control import ControlCoordinator
from diskscan.core.output import EventWriter
from diskscan.core.scanner import Scanner, ScannerConfig, compute_directory_totals
from diskscan.models.control import Cancel, ControlCommand, Pause, Refresh, Resume
from diskscan.settings import load_scanner_config

log = logging.getLogger(__name__)

_BUS_NAME = "io.github.diskscan"
_OBJECT_PATH = "/io/github/diskscan"
_INTERFACE = "io.github.diskscan.Scanner"


class SignalEventWriter(EventWriter):
    """Relays batches of encoded events to the event loop thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop, emit_lines, flush_batch_size: int) -> None:
        super().__init__(flush_batch_size)
        self._loop = loop
        self._emit_lines = emit_lines

    def _deliver(self, lines: list[str]) -> None:
        self._loop.call_soon_threadsafe(self._emit_lines, lines)


# noinspection PyPep8Naming
class ScannerDBusService(ServiceInterface):
    """D-Bus service interface for diskscan."""

    def __init__(self, loop: asyncio.AbstractEventLoop, config: ScannerConfig | None = None) -> None:
        super().__init__(_INTERFACE)
        self._loop = loop
        self._config = config or load_scanner_config()
        self._lock = threading.Lock()
        self._control: ControlCoordinator | None = None
        self._thread: threading.Thread | None = None

    @method()
    def Scan(self, path: "s") -> "b":  # type: ignore[override]
        """Start scanning path in the background. False if a scan is running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                log.info("Scan of %s rejected, another scan is running", path)
                return False
            writer = SignalEventWriter(self._loop, self.ScanEvents, self._config.flush_batch_size)
            scanner, self._control = Scanner.with_control_channel(sink=writer.write, config=self._config)
            self._thread = threading.Thread(
                target=self._run_scan,
                args=(scanner, writer, path),
                name="diskscan-scan",
                daemon=True,
            )
            self._thread.start()
        return True

    @method()
    def Pause(self) -> "b":  # type: ignore[override]
        return self._send(Pause())

    @method()
    def Resume(self) -> "b":  # type: ignore[override]
        return self._send(Resume())

    @method()
    def Cancel(self) -> "b":  # type: ignore[override]
        return self._send(Cancel())

    @method()
    def Refresh(self, path: "s") -> "b":  # type: ignore[override]
        return self._send(Refresh(path))

    @method()
    def IsScanning(self) -> "b":  # type: ignore[override]
        return self.is_scanning()

    @method()
    def Totals(self, path: "s") -> "s":  # type: ignore[override]
        """Total size and item count of path as JSON, computed without events."""
        return totals_json(path)

    @signal()
    def ScanEvents(self, lines: list[str]) -> "as":  # type: ignore[override]
        return lines

    @signal()
    def ScanFinished(self, path: str) -> "s":  # type: ignore[override]
        return path

    def is_scanning(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def _send(self, command: ControlCommand) -> bool:
        """Queue a command without ever blocking the event loop."""
        with self._lock:
            control = self._control if self._thread is not None and self._thread.is_alive() else None
        if control is None:
            log.debug("No scan running, ignoring %s", type(command).__name__.lower())
            return False
        return control.send(command, block=False)

    def _run_scan(self, scanner: Scanner, writer: SignalEventWriter, path: str) -> None:
        try:
            scanner.scan(path)
        except Exception:
            log.exception("Scan of %s failed", path)
        finally:
            writer.flush()
            self._loop.call_soon_threadsafe(self.ScanFinished, path)


def totals_json(path: str) -> str:
    try:
        totals = compute_directory_totals(path)
    except FileNotFoundError as exc:
        return json.dumps({"error": str(exc)})
    return json.dumps({"total_size": totals.total_size, "total_items": totals.total_items})


async def run_service() -> None:
    """Start the D-Bus service."""
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    service = ScannerDBusService(asyncio.get_running_loop())
    bus.export(_OBJECT_PATH, service)
    await bus.request_name(_BUS_NAME)
    log.info("D-Bus service started on %s", _BUS_NAME)
    await bus.wait_for_disconnect()


def start_service() -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service())
