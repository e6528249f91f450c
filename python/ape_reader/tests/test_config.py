"""Tests for config.py loading and validation."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import eprint, load_config, validate_config

ENV_NAMES = ("APE_SLOW_SCAN", "APE_SCAN_CHUNK_SIZE", "APE_MAX_TAG_SIZE", "APE_USE_FALLBACK")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove APE settings from the process environment."""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_env_file(self, tmp_path, capsys):
        """Should fall back to defaults and warn on stderr."""
        config = load_config(str(tmp_path / "missing.env"))
        assert config == {
            "slow_scan": False,
            "scan_chunk_size": 4096,
            "max_tag_size": 1024 * 1024,
            "use_fallback": True,
        }
        assert "falling back to process env" in capsys.readouterr().err

    def test_reads_env_file(self, tmp_path, capsys):
        """Should load values from the .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "APE_SLOW_SCAN=yes\n"
            "APE_SCAN_CHUNK_SIZE=512\n"
            "APE_MAX_TAG_SIZE=65536\n"
            "APE_USE_FALLBACK=false\n"
        )
        config = load_config(str(env_file))
        assert config["slow_scan"] is True
        assert config["scan_chunk_size"] == 512
        assert config["max_tag_size"] == 65536
        assert config["use_fallback"] is False
        assert "Loaded environment" in capsys.readouterr().err

    def test_process_env_used(self, tmp_path, monkeypatch):
        """Process environment values apply without an .env file."""
        monkeypatch.setenv("APE_SLOW_SCAN", "1")
        config = load_config(str(tmp_path / "missing.env"))
        assert config["slow_scan"] is True

    def test_bad_integer_becomes_none(self, tmp_path, monkeypatch):
        """Unparseable integers are kept as None for validation."""
        monkeypatch.setenv("APE_MAX_TAG_SIZE", "lots")
        config = load_config(str(tmp_path / "missing.env"))
        assert config["max_tag_size"] is None


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_config(self):
        """Should return no problems for sane values."""
        config = {"scan_chunk_size": 4096, "max_tag_size": 1024}
        assert validate_config(config) == []

    def test_reports_non_integer(self):
        """Should name the variable that failed to parse."""
        problems = validate_config({"scan_chunk_size": None, "max_tag_size": 1024})
        assert problems == ["APE_SCAN_CHUNK_SIZE must be an integer"]

    def test_reports_non_positive(self):
        """Zero and negative sizes are rejected."""
        problems = validate_config({"scan_chunk_size": 0, "max_tag_size": -5})
        assert len(problems) == 2
        assert "APE_MAX_TAG_SIZE must be positive" in problems[1]


class TestEprint:
    """Tests for eprint."""

    def test_prints_to_stderr(self, capsys):
        eprint("hello", "world")
        captured = capsys.readouterr()
        assert captured.err == "hello world\n"
        assert captured.out == ""
