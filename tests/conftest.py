"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from diskscan.settings import Settings


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Point the settings store at a temp config dir."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr(Settings, "_instance", None)
    return config_home / "diskscan" / "settings.json"


@pytest.fixture
def scan_root(tmp_path) -> Path:
    """Empty directory to build a test tree in."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def nested_tree(scan_root) -> Path:
    """``a.txt`` (10 bytes) and ``sub/b.bin`` (20 bytes)."""
    (scan_root / "a.txt").write_bytes(b"a" * 10)
    (scan_root / "sub").mkdir()
    (scan_root / "sub" / "b.bin").write_bytes(b"b" * 20)
    return scan_root


@pytest.fixture
def symlink_tree(scan_root) -> Path:
    """``target/inside.txt`` (8 bytes) and ``link -> target``."""
    (scan_root / "target").mkdir()
    (scan_root / "target" / "inside.txt").write_bytes(b"i" * 8)
    (scan_root / "link").symlink_to(scan_root / "target", target_is_directory=True)
    return scan_root
