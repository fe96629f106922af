"""Cross-check scanner totals against ``du``."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

from diskscan.core.scanner import compute_directory_totals
from diskscan.models.file_entry import ScanTotals
from diskscan.utils import has_command

log = logging.getLogger(__name__)

_DU_TIMEOUT = 600  # seconds


@dataclass(slots=True)
class VerifyReport:
    """Scanner totals next to the size ``du`` reports for the same path."""

    path: str
    totals: ScanTotals
    du_bytes: int | None

    @property
    def delta(self) -> int | None:
        if self.du_bytes is None:
            return None
        return abs(self.du_bytes - self.totals.total_size)

    @property
    def delta_pct(self) -> float | None:
        if self.du_bytes is None:
            return None
        if self.du_bytes == 0:
            return 0.0
        return round(self.delta / self.du_bytes * 100, 1)

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "total_size": self.totals.total_size,
            "total_items": self.totals.total_items,
            "du_bytes": self.du_bytes,
            "delta": self.delta,
            "delta_pct": self.delta_pct,
        }


def du_size_bytes(path: str) -> int | None:
    """Disk usage of ``path`` according to ``du -sk``, or None if unavailable.

    ``du`` counts allocated blocks while the scanner sums apparent sizes,
    so the two only ever agree approximately.
    """
    if not has_command("du"):
        return None
    try:
        proc = subprocess.run(
            ["du", "-sk", path],
            capture_output=True,
            text=True,
            timeout=_DU_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        log.warning("du failed for %s: %s", path, exc)
        return None
    if proc.returncode != 0:
        log.warning("du exited with %d for %s: %s", proc.returncode, path, proc.stderr.strip())
        return None
    try:
        return int(proc.stdout.split()[0]) * 1024
    except (IndexError, ValueError):
        log.warning("Unexpected du output for %s: %r", path, proc.stdout)
        return None


def compare_with_du(path: str) -> VerifyReport:
    """Scan ``path`` without events and compare the result with ``du``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    totals = compute_directory_totals(path)
    return VerifyReport(path=path, totals=totals, du_bytes=du_size_bytes(path))
