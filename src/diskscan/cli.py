"""CLI interface for diskscan."""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from collections import deque

import click

from diskscan.core.command_reader import CommandReader
from diskscan.core.output import StreamEventWriter
from diskscan.core.scanner import Scanner, compute_directory_totals
from diskscan.settings import SCANNER_KEYS, Settings, load_scanner_config, scanner_config_values
from diskscan.utils import bytes_to_human, format_elapsed
from diskscan.verify import compare_with_du

log = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """diskscan — streaming, controllable disk usage scanner."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", default=".")
@click.option("--no-control", is_flag=True, help="Do not read control commands from stdin")
@click.option(
    "--follow-refresh",
    is_flag=True,
    help="After the scan, rescan every folder requested with refresh:<path>",
)
def scan(path: str, no_control: bool, follow_refresh: bool) -> None:
    """Stream scan events for PATH to stdout, one JSON object per line.

    While scanning, stdin accepts the commands pause, resume, cancel and
    refresh:<path>, one per line.
    """
    config = load_scanner_config()
    writer = StreamEventWriter(
        click.get_text_stream("stdout", encoding="utf-8"),
        flush_batch_size=config.flush_batch_size,
    )
    scanner, control = Scanner.with_control_channel(sink=writer.write, config=config)
    if not no_control:
        CommandReader(click.get_text_stream("stdin"), control).start()

    try:
        totals = scanner.scan(path)
        if totals is not None and follow_refresh:
            _rescan_refreshed(scanner)
        writer.flush()
    except BrokenPipeError:
        log.info("Event consumer closed the output stream")
        _silence_stdout()
        sys.exit(1)

    if totals is None:
        sys.exit(1)


def _silence_stdout() -> None:
    """Send whatever is still buffered for stdout to devnull at exit."""
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def _rescan_refreshed(scanner: Scanner) -> None:
    """Run a separate scan for each folder the host asked to refresh."""
    control = scanner.control
    pending: deque[str] = deque()
    while not control.cancelled:
        pending.extend(control.refresh_requests)
        control.refresh_requests.clear()
        if not pending:
            return
        target = pending.popleft()
        log.info("Rescanning %s on request", target)
        scanner.scan(target)


# ── totals ───────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", default=".")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def totals(path: str, as_json: bool) -> None:
    """Print total size and item count of PATH without streaming events."""
    start = time.monotonic()
    try:
        result = compute_directory_totals(path)
    except FileNotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    elapsed = time.monotonic() - start

    if as_json:
        click.echo(json.dumps({"path": path, "total_size": result.total_size, "total_items": result.total_items}))
        return

    click.echo(f"\n  Path:   {path}")
    click.echo(
        f"  Total:  {click.style(bytes_to_human(result.total_size), fg='green', bold=True)}"
        f" ({result.total_size:,} bytes)"
    )
    click.echo(f"  Items:  {result.total_items:,}")
    click.echo(f"  Took:   {format_elapsed(elapsed)}\n")


# ── verify ───────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", default=".")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def verify(path: str, as_json: bool) -> None:
    """Compare scanner totals for PATH with `du -sk`."""
    try:
        report = compare_with_du(path)
    except FileNotFoundError as exc:
        click.echo(f"verify: failed to scan {path}: {exc}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    total_size = report.totals.total_size
    click.echo(f"Path: {path}")
    click.echo(
        f"Scanner total: {total_size} ({bytes_to_human(total_size)}), items: {report.totals.total_items}"
    )
    if report.du_bytes is None:
        click.echo("du -sk: unavailable")
        return
    click.echo(f"du -sk: {report.du_bytes} ({bytes_to_human(report.du_bytes)})")
    click.echo(f"Delta: {bytes_to_human(report.delta)} ({report.delta_pct}%)")


# ── config ───────────────────────────────────────────────────────────────

@main.group("config")
def config_group() -> None:
    """Show or change scanner settings."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Print the settings the scanner would use."""
    settings = Settings.instance()
    values = scanner_config_values(load_scanner_config(settings))

    if as_json:
        click.echo(json.dumps(values, indent=2))
        return

    click.echo(f"Settings file: {settings.path}")
    for key, value in values.items():
        click.echo(f"  {key} = {value}")


@config_group.command("set")
@click.argument("key", type=click.Choice(SCANNER_KEYS))
@click.argument("value", type=click.IntRange(min=1))
def config_set(key: str, value: int) -> None:
    """Store VALUE for KEY in the settings file."""
    settings = Settings.instance()
    settings.set(key, value)
    log.info("Saved %s = %d to %s", key, value, settings.path)
    click.echo(f"{key} = {value}")


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
def service_start() -> None:
    """Start the D-Bus service in foreground."""
    from diskscan.dbus_service import start_service

    click.echo("Starting diskscan D-Bus service...", err=True)
    start_service()
