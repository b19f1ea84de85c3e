"""
Tests for ledger configuration and caller identity helpers.
"""

import json
import logging
from pathlib import Path

import pytest

from covenant.core import (
    LedgerConfig,
    LogicalClock,
    StaticIdentity,
    configure_logging,
    get_config,
    set_config,
)


class TestLedgerConfig:
    """Tests for LedgerConfig."""

    def test_defaults(self):
        config = LedgerConfig()
        assert config.db_path is None
        assert config.max_title_length == 256
        assert config.max_description_length == 4096
        assert config.max_metadata_length == 1024
        assert config.enforce_signature_cap is False
        assert config.log_level == "INFO"

    def test_db_path_coerced(self):
        config = LedgerConfig(db_path="data/ledger.db")
        assert config.db_path == Path("data/ledger.db")

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            LedgerConfig(max_title_length=0)

    def test_non_bool_signature_cap_rejected(self):
        with pytest.raises(ValueError, match="enforce_signature_cap"):
            LedgerConfig(enforce_signature_cap="false")
        with pytest.raises(ValueError):
            LedgerConfig(enforce_signature_cap=1)

    def test_quoted_signature_cap_in_file_rejected(self, temp_dir):
        """Test a quoted boolean in a config file is not silently truthy."""
        path = temp_dir / "ledger.yaml"
        path.write_text('enforce_signature_cap: "false"\n')
        with pytest.raises(ValueError, match="enforce_signature_cap"):
            LedgerConfig.from_file(path)

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            LedgerConfig(log_level="chatty")

    def test_from_env(self, monkeypatch, temp_db_path):
        monkeypatch.setenv("COVENANT_DB_PATH", str(temp_db_path))
        monkeypatch.setenv("COVENANT_MAX_TITLE_LENGTH", "64")
        monkeypatch.setenv("COVENANT_ENFORCE_SIGNATURE_CAP", "yes")
        monkeypatch.setenv("COVENANT_LOG_LEVEL", "debug")

        config = LedgerConfig.from_env()
        assert config.db_path == temp_db_path
        assert config.max_title_length == 64
        assert config.enforce_signature_cap is True
        assert config.log_level == "debug"

    def test_from_yaml_file(self, temp_dir):
        path = temp_dir / "ledger.yaml"
        path.write_text(
            "db_path: ledger.db\n"
            "max_metadata_length: 200\n"
            "enforce_signature_cap: true\n"
        )

        config = LedgerConfig.from_file(path)
        assert config.db_path == Path("ledger.db")
        assert config.max_metadata_length == 200
        assert config.enforce_signature_cap is True

    def test_from_json_file(self, temp_dir):
        path = temp_dir / "ledger.json"
        path.write_text(json.dumps({"max_title_length": 32}))

        assert LedgerConfig.from_file(path).max_title_length == 32

    def test_empty_yaml_gives_defaults(self, temp_dir):
        path = temp_dir / "ledger.yml"
        path.write_text("")
        assert LedgerConfig.from_file(path) == LedgerConfig()

    def test_unknown_key_rejected(self, temp_dir):
        path = temp_dir / "ledger.yaml"
        path.write_text("max_signatures: 12\n")
        with pytest.raises(ValueError, match="max_signatures"):
            LedgerConfig.from_file(path)

    def test_malformed_yaml_rejected(self, temp_dir):
        path = temp_dir / "ledger.yaml"
        path.write_text("db_path: [unclosed\n")
        with pytest.raises(ValueError):
            LedgerConfig.from_file(path)

    def test_non_mapping_rejected(self, temp_dir):
        path = temp_dir / "ledger.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ValueError):
            LedgerConfig.from_file(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ValueError):
            LedgerConfig.from_file(temp_dir / "absent.yaml")

    def test_global_config(self, monkeypatch):
        monkeypatch.setenv("COVENANT_MAX_TITLE_LENGTH", "99")
        assert get_config().max_title_length == 99

        custom = LedgerConfig(max_title_length=10)
        set_config(custom)
        assert get_config() is custom

    def test_configure_logging(self):
        configure_logging("warning")
        assert logging.getLogger().handlers


class TestIdentity:
    """Tests for identity helpers."""

    def test_static_identity_snapshot(self):
        snapshot = StaticIdentity("alice", timestamp=4).snapshot()
        assert snapshot.caller == "alice"
        assert snapshot.timestamp == 4

    def test_logical_clock_advances(self):
        clock = LogicalClock(start=10)
        first = clock.as_caller("alice")
        second = clock.as_caller("bob")

        assert first.timestamp == 11
        assert second.timestamp == 12
        assert clock.now == 12

    def test_clock_cannot_start_negative(self):
        with pytest.raises(ValueError):
            LogicalClock(start=-1)
