"""Tests for the du cross-check."""

from __future__ import annotations

import subprocess

import pytest

from diskscan.models.file_entry import ScanTotals
from diskscan.verify import VerifyReport, compare_with_du, du_size_bytes


def _completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["du"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_du(monkeypatch):
    monkeypatch.setattr("diskscan.verify.has_command", lambda name: True)

    def install(result):
        calls: list[list[str]] = []

        def run(args, **kwargs):
            calls.append(args)
            if isinstance(result, Exception):
                raise result
            return result

        monkeypatch.setattr("diskscan.verify.subprocess.run", run)
        return calls

    return install


class TestDuSizeBytes:
    def test_parses_kilobytes(self, fake_du):
        calls = fake_du(_completed("12\t/data\n"))
        assert du_size_bytes("/data") == 12 * 1024
        assert calls == [["du", "-sk", "/data"]]

    def test_failure_exit(self, fake_du):
        fake_du(_completed(returncode=1, stderr="du: cannot access"))
        assert du_size_bytes("/data") is None

    def test_garbage_output(self, fake_du):
        fake_du(_completed("oops"))
        assert du_size_bytes("/data") is None

    def test_timeout(self, fake_du):
        fake_du(subprocess.TimeoutExpired(cmd="du", timeout=1))
        assert du_size_bytes("/data") is None

    def test_missing_du(self, monkeypatch):
        monkeypatch.setattr("diskscan.verify.has_command", lambda name: False)
        assert du_size_bytes("/data") is None


class TestVerifyReport:
    def test_delta(self):
        report = VerifyReport(path="/data", totals=ScanTotals(900, 3), du_bytes=1000)
        assert report.delta == 100
        assert report.delta_pct == 10.0

    def test_scanner_larger_than_du(self):
        report = VerifyReport(path="/data", totals=ScanTotals(1100, 3), du_bytes=1000)
        assert report.delta == 100

    def test_zero_du(self):
        report = VerifyReport(path="/data", totals=ScanTotals(0, 0), du_bytes=0)
        assert report.delta_pct == 0.0

    def test_without_du(self):
        report = VerifyReport(path="/data", totals=ScanTotals(5, 1), du_bytes=None)
        assert report.delta is None
        assert report.to_dict()["delta_pct"] is None

    def test_compare_with_du(self, nested_tree, monkeypatch):
        monkeypatch.setattr("diskscan.verify.du_size_bytes", lambda path: 4096)
        report = compare_with_du(str(nested_tree))
        assert report.totals == ScanTotals(30, 2)
        assert report.du_bytes == 4096

    def test_compare_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            compare_with_du(str(tmp_path / "missing"))
