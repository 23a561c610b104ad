"""Tests for cache commands."""

import json
import re

import pytest
from typer.testing import CliRunner

from src.tvmclient.commands.cache import app
from tests.fixtures.tvm import FUTURE, PAST

runner = CliRunner()


@pytest.fixture
def cache_file(tmp_path):
    path = tmp_path / ".tvmCache"
    path.write_text(
        json.dumps(
            {
                "a": {"expiration": FUTURE},
                "b": {"expiration": FUTURE},
                "c": {"expiration": PAST},
            }
        )
    )
    return path


def row_value(output, label):
    match = re.search(rf"{label}\W+(\d+)", output)
    return int(match.group(1)) if match else None


def test_cache_command_structure():
    """Test that the cache commands have the expected structure."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "status" in result.output
    assert "clear" in result.output


class TestCacheStatus:
    """Test cache status command."""

    def test_status(self, cache_file):
        result = runner.invoke(app, ["status", "--cache-file", str(cache_file)])

        assert result.exit_code == 0, result.output
        assert "Credential Cache Status" in result.output
        assert row_value(result.output, "Total Entries") == 3
        assert row_value(result.output, "Fresh Entries") == 2
        assert row_value(result.output, "Expired Entries") == 1

    def test_status_empty(self, tmp_path):
        result = runner.invoke(app, ["status", "--cache-file", str(tmp_path / "missing")])

        assert result.exit_code == 0
        assert "No cached credentials found." in result.output

    def test_status_malformed_file(self, tmp_path):
        path = tmp_path / ".tvmCache"
        path.write_text("garbage")

        result = runner.invoke(app, ["status", "--cache-file", str(path)])

        assert result.exit_code == 0
        assert row_value(result.output, "Total Entries") == 0

    def test_cache_file_from_config(self, cache_file, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(f"cache_file: {cache_file}\n")

        result = runner.invoke(app, ["status", "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert row_value(result.output, "Total Entries") == 3

    def test_cache_disabled_in_config(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("cache_file: null\n")

        result = runner.invoke(app, ["status", "--config", str(config)])

        assert result.exit_code == 0
        assert "disabled" in result.output

    def test_invalid_config(self, tmp_path):
        result = runner.invoke(app, ["status", "--config", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 1
        assert "ERROR_BAD_ARGUMENT" in result.output


class TestCacheClear:
    """Test cache clear command."""

    def test_clear_force(self, cache_file):
        result = runner.invoke(app, ["clear", "--force", "--cache-file", str(cache_file)])

        assert result.exit_code == 0, result.output
        assert "Cleared 3 cached credentials." in result.output
        assert not cache_file.exists()

    def test_clear_confirmed(self, cache_file):
        result = runner.invoke(app, ["clear", "--cache-file", str(cache_file)], input="y\n")

        assert result.exit_code == 0
        assert not cache_file.exists()

    def test_clear_cancelled(self, cache_file):
        result = runner.invoke(app, ["clear", "--cache-file", str(cache_file)], input="n\n")

        assert result.exit_code == 0
        assert "Cache clear cancelled." in result.output
        assert cache_file.exists()

    def test_clear_empty(self, tmp_path):
        result = runner.invoke(app, ["clear", "--cache-file", str(tmp_path / "missing")])

        assert result.exit_code == 0
        assert "Cache is already empty." in result.output
