"""Tests for event encoding and the buffered writers."""

from __future__ import annotations

import io
import json
import logging

from diskscan.core.output import EventWriter, StreamEventWriter, encode_event
from diskscan.models.file_entry import FileEntry
from diskscan.models.scan_event import (
    DoneEvent,
    EntryEvent,
    ErrorEvent,
    FolderCompleteEvent,
    StatusEvent,
)


def _entry(name: str = "a.txt", path: str | None = None) -> EntryEvent:
    return EntryEvent(
        FileEntry(
            path=path or f"/data/{name}",
            name=name,
            size=10,
            is_dir=False,
            is_symlink=False,
            modified=1_700_000_000,
            item_count=1,
            file_type="document",
        )
    )


class RecordingWriter(EventWriter):
    def __init__(self, flush_batch_size: int) -> None:
        super().__init__(flush_batch_size)
        self.batches: list[list[str]] = []

    def _deliver(self, lines: list[str]) -> None:
        self.batches.append(lines)


class TestEncodeEvent:
    def test_entry_is_flat(self):
        record = json.loads(encode_event(_entry()))
        assert record == {
            "type": "entry",
            "path": "/data/a.txt",
            "name": "a.txt",
            "size": 10,
            "is_dir": False,
            "is_symlink": False,
            "modified": 1_700_000_000,
            "item_count": 1,
            "file_type": "document",
        }

    def test_missing_modified_is_null(self):
        event = _entry()
        event.entry.modified = None
        assert json.loads(encode_event(event))["modified"] is None

    def test_variant_tags(self):
        assert json.loads(encode_event(FolderCompleteEvent("/data", 30))) == {
            "type": "complete",
            "path": "/data",
            "total_size": 30,
        }
        assert json.loads(encode_event(ErrorEvent("/data/x", "Permission denied"))) == {
            "type": "error",
            "path": "/data/x",
            "message": "Permission denied",
        }
        assert json.loads(encode_event(StatusEvent("paused"))) == {"type": "status", "status": "paused"}
        assert json.loads(encode_event(DoneEvent(30, 2))) == {
            "type": "done",
            "total_size": 30,
            "total_items": 2,
        }

    def test_single_line(self):
        assert "\n" not in encode_event(_entry(name="new\nline.txt"))

    def test_non_ascii_kept(self):
        assert "Übersicht.pdf" in encode_event(_entry(name="Übersicht.pdf"))

    def test_unencodable_path_is_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="diskscan.core.output"):
            assert encode_event(_entry(path="/data/\udcff.bin")) is None
        assert "could not be encoded" in caplog.text


class TestEventWriter:
    def test_entries_are_batched(self):
        writer = RecordingWriter(flush_batch_size=3)
        writer.write(_entry("1"))
        writer.write(_entry("2"))
        assert writer.batches == []
        writer.write(_entry("3"))
        assert len(writer.batches) == 1
        assert len(writer.batches[0]) == 3

    def test_non_entry_events_flush_immediately(self):
        writer = RecordingWriter(flush_batch_size=100)
        writer.write(_entry("1"))
        writer.write(StatusEvent("paused"))
        assert len(writer.batches) == 1
        kinds = [json.loads(line)["type"] for line in writer.batches[0]]
        assert kinds == ["entry", "status"]

    def test_flush_delivers_leftovers(self):
        writer = RecordingWriter(flush_batch_size=100)
        writer.write(_entry("1"))
        writer.flush()
        writer.flush()
        assert len(writer.batches) == 1

    def test_unencodable_event_does_not_break_stream(self):
        writer = RecordingWriter(flush_batch_size=1)
        writer.write(_entry(path="/data/\udcff"))
        writer.write(DoneEvent(0, 0))
        assert [json.loads(line)["type"] for batch in writer.batches for line in batch] == ["done"]


class TestStreamEventWriter:
    def test_one_record_per_line(self):
        stream = io.StringIO()
        writer = StreamEventWriter(stream, flush_batch_size=2)
        writer.write(_entry("1"))
        assert stream.getvalue() == ""
        writer.write(_entry("2"))
        writer.write(DoneEvent(20, 2))

        lines = stream.getvalue().splitlines()
        assert len(lines) == 3
        assert [json.loads(line)["type"] for line in lines] == ["entry", "entry", "done"]
        assert stream.getvalue().endswith("\n")
