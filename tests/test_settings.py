"""Tests for the settings store and scanner configuration."""

from __future__ import annotations

import json

from diskscan.settings import Settings, load_scanner_config


class TestSettings:
    def test_set_persists_nested_key(self, isolate_settings):
        settings = Settings()
        settings.set("control.queue_capacity", 32)

        assert json.loads(isolate_settings.read_text()) == {"control": {"queue_capacity": 32}}
        assert Settings().get("control.queue_capacity") == 32

    def test_get_default(self):
        assert Settings().get("scanner.missing", "fallback") == "fallback"

    def test_corrupt_file_is_ignored(self, isolate_settings):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text("{not json")
        assert Settings().get("scanner.flush_batch_size") is None

    def test_instance_is_shared(self):
        assert Settings.instance() is Settings.instance()


class TestScannerConfig:
    def test_defaults(self):
        config = load_scanner_config(Settings())
        assert config.flush_batch_size == 256
        assert config.queue_capacity == 16
        assert config.poll_interval == 0.05

    def test_overrides(self):
        settings = Settings()
        settings.set("scanner.flush_batch_size", 8)
        settings.set("control.queue_capacity", 4)
        settings.set("control.poll_interval_ms", 200)

        config = load_scanner_config(settings)
        assert config.flush_batch_size == 8
        assert config.queue_capacity == 4
        assert config.poll_interval == 0.2

    def test_invalid_values_fall_back(self, caplog):
        settings = Settings()
        settings.set("scanner.flush_batch_size", "lots")
        settings.set("control.queue_capacity", 0)
        settings.set("control.poll_interval_ms", True)

        config = load_scanner_config(settings)
        assert config.flush_batch_size == 256
        assert config.queue_capacity == 16
        assert config.poll_interval == 0.05
        assert "Invalid value for scanner.flush_batch_size" in caplog.text
