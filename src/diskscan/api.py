"""Plain call surface for embedding the scanner in a host process.

``scan_path`` mirrors the C-style entry point hosts load from a shared
library: it takes a NUL-terminated path and streams events to stdout with
no control channel attached.
"""

from __future__ import annotations

import logging
import sys

from diskscan.core.output import StreamEventWriter
from diskscan.core.scanner import Scanner, compute_directory_totals
from diskscan.models.file_entry import ScanTotals

log = logging.getLogger(__name__)

__all__ = ["compute_directory_totals", "scan_path"]


def scan_path(path: str | bytes) -> ScanTotals | None:
    """Stream a full scan of ``path`` to stdout.

    Bytes are read up to the first NUL and must be valid UTF-8; otherwise
    nothing is scanned and None is returned.
    """
    if isinstance(path, bytes):
        raw = path.split(b"\0", 1)[0]
        try:
            path = raw.decode("utf-8")
        except UnicodeDecodeError:
            log.warning("Ignoring scan request with a non UTF-8 path: %r", raw)
            return None

    writer = StreamEventWriter(sys.stdout)
    scanner = Scanner(sink=writer.write)
    try:
        return scanner.scan(path)
    finally:
        writer.flush()
