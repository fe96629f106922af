"""Depth-first disk usage traversal that streams scan events."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Iterator

from diskscan.core.control import DEFAULT_CAPACITY, DEFAULT_POLL_INTERVAL, ControlCoordinator
from diskscan.core.file_types import detect_file_type
from diskscan.core.output import DEFAULT_FLUSH_BATCH_SIZE, EventSink
from diskscan.models.file_entry import FileEntry, ScanTotals
from diskscan.models.scan_event import (
    DoneEvent,
    EntryEvent,
    ErrorEvent,
    FolderCompleteEvent,
    ScanEvent,
    StatusEvent,
)

log = logging.getLogger(__name__)

MISSING_PATH_MESSAGE = "Path does not exist"


@dataclass(slots=True)
class ScannerConfig:
    """Tunables for the scanner, its control channel and its output."""

    flush_batch_size: int = DEFAULT_FLUSH_BATCH_SIZE
    queue_capacity: int = DEFAULT_CAPACITY
    poll_interval: float = DEFAULT_POLL_INTERVAL


@dataclass(slots=True)
class _DirFrame:
    """A directory being walked and the entry that led into it."""

    path: str
    entries: Iterator[os.DirEntry]
    totals: ScanTotals = field(default_factory=ScanTotals)
    dir_entry: os.DirEntry | None = None
    st: os.stat_result | None = None


class Scanner:
    """Walks a directory tree and reports sizes through an event sink.

    Traversal is single-threaded.  Between every directory listing and
    every entry the scanner calls the control coordinator's checkpoint,
    which is the only place where pause, resume and cancel take effect.
    """

    def __init__(
        self,
        sink: EventSink | None = None,
        control: ControlCoordinator | None = None,
        config: ScannerConfig | None = None,
    ) -> None:
        self.config = config or ScannerConfig()
        self._sink = sink
        self.control = control or ControlCoordinator(
            capacity=self.config.queue_capacity,
            poll_interval=self.config.poll_interval,
        )
        self.control.on_status = self._emit_status

    @classmethod
    def with_control_channel(
        cls,
        sink: EventSink | None = None,
        config: ScannerConfig | None = None,
    ) -> tuple[Scanner, ControlCoordinator]:
        """Create a scanner plus the coordinator other threads send commands to."""
        scanner = cls(sink=sink, config=config)
        return scanner, scanner.control

    def scan(self, root_path: str) -> ScanTotals | None:
        """Scan ``root_path`` streaming every event, ending with a done event.

        A missing root yields a single error event and no done event;
        None is returned in that case.
        """
        if not os.path.exists(root_path):
            log.info("Scan root does not exist: %s", root_path)
            self._emit(ErrorEvent(path=display_path(root_path), message=MISSING_PATH_MESSAGE))
            return None

        self.control.reset()
        log.info("Scanning %s", root_path)
        totals = self.scan_directory(root_path, emit_entries=True)
        self._emit(DoneEvent(total_size=totals.total_size, total_items=totals.total_items))
        log.info(
            "Scan of %s finished: %d bytes in %d items%s",
            root_path,
            totals.total_size,
            totals.total_items,
            " (cancelled)" if self.control.cancelled else "",
        )
        return totals

    def scan_directory(self, path: str, emit_entries: bool) -> ScanTotals:
        """Total ``path`` depth-first, emitting events in post-order.

        Open directories are kept on an explicit stack, so nesting depth is
        limited only by the filesystem.  A directory's entry event and its
        completion event are emitted when its frame is popped, after all of
        its children.

        With ``emit_entries`` False nothing is emitted, which makes this a
        plain totals computation.  If the scan is cancelled part way the
        totals gathered so far are returned and the directories still on
        the stack emit neither an entry nor a completion event.
        """
        if not self.control.check_control():
            return ScanTotals()
        root = self._open_frame(path, emit_entries)
        if root is None:
            return ScanTotals()

        stack = [root]
        while True:
            frame = stack[-1]
            dir_entry = next(frame.entries, None)
            if dir_entry is None:
                stack.pop()
                if emit_entries:
                    complete = FolderCompleteEvent(path=display_path(frame.path), total_size=frame.totals.total_size)
                    self._emit(complete)
                if not stack:
                    return frame.totals
                self._record(stack[-1], frame.dir_entry, frame.st, frame.totals, emit_entries)
                continue

            if not self.control.check_control():
                break

            try:
                st = dir_entry.stat(follow_symlinks=False)
            except OSError as exc:
                if emit_entries:
                    self._emit_error(dir_entry.path, exc)
                continue

            if stat.S_ISDIR(st.st_mode):
                if not self.control.check_control():
                    break
                child = self._open_frame(dir_entry.path, emit_entries, dir_entry, st)
                if child is not None:
                    stack.append(child)
                    continue
                self._record(frame, dir_entry, st, ScanTotals(), emit_entries)
            else:
                self._record(frame, dir_entry, st, ScanTotals(st.st_size, 1), emit_entries)

        totals = ScanTotals()
        for frame in stack:
            totals.add(frame.totals.total_size, frame.totals.total_items)
        return totals

    def _open_frame(
        self,
        path: str,
        emit_entries: bool,
        dir_entry: os.DirEntry | None = None,
        st: os.stat_result | None = None,
    ) -> _DirFrame | None:
        """Read the listing of ``path`` into a new frame.

        The listing is read in full and its handle closed right away, so
        deep trees never hold one open descriptor per level.  Returns None
        if the directory cannot be opened; a read error part way keeps the
        entries read so far.
        """
        try:
            listing = os.scandir(path)
        except OSError as exc:
            if emit_entries:
                self._emit_error(path, exc)
            return None

        entries: list[os.DirEntry] = []
        with listing:
            try:
                for entry in listing:
                    entries.append(entry)
            except OSError as exc:
                if emit_entries:
                    self._emit_error(path, exc)
        return _DirFrame(path=path, entries=iter(entries), dir_entry=dir_entry, st=st)

    def _record(
        self,
        parent: _DirFrame,
        dir_entry: os.DirEntry,
        st: os.stat_result,
        totals: ScanTotals,
        emit_entries: bool,
    ) -> None:
        if emit_entries:
            self._emit(
                EntryEvent(
                    FileEntry(
                        path=display_path(dir_entry.path),
                        name=display_path(dir_entry.name),
                        size=totals.total_size,
                        is_dir=stat.S_ISDIR(st.st_mode),
                        is_symlink=stat.S_ISLNK(st.st_mode),
                        modified=_modified_seconds(st),
                        item_count=totals.total_items,
                        file_type=detect_file_type(dir_entry.path),
                    )
                )
            )
        parent.totals.add(totals.total_size, totals.total_items)

    def _emit(self, event: ScanEvent) -> None:
        if self._sink is not None:
            self._sink(event)

    def _emit_status(self, status: str) -> None:
        self._emit(StatusEvent(status=status))

    def _emit_error(self, path: str, exc: OSError) -> None:
        message = exc.strerror or str(exc)
        log.debug("Scan error at %s: %s", path, message)
        self._emit(ErrorEvent(path=display_path(path), message=message))


def display_path(path: str) -> str:
    """Text form of a filesystem path with undecodable bytes as U+FFFD."""
    return os.fsencode(path).decode("utf-8", "replace")


def _modified_seconds(st: os.stat_result) -> int | None:
    """Whole seconds since the Unix epoch, or None for pre-epoch timestamps."""
    mtime = st.st_mtime
    if mtime < 0:
        return None
    return int(mtime)


def compute_directory_totals(path: str) -> ScanTotals:
    """Total a directory tree without emitting any events.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"{MISSING_PATH_MESSAGE}: {path}")
    return Scanner().scan_directory(path, emit_entries=False)
