"""Tests for CLI commands."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from ghstars.cli import main


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point settings at a temporary data directory."""
    monkeypatch.setenv("GHSTARS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("GHSTARS_DAY_HOUR_ENDPOINT", "https://hours.test/api")
    return tmp_path / "data"


class TestCLI:
    """Tests for CLI commands."""

    def test_main_help(self) -> None:
        """Test main help output."""
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "GitHub star counts" in result.output

    def test_get_help(self) -> None:
        """Test get command help."""
        runner = CliRunner()
        result = runner.invoke(main, ["get", "--help"])

        assert result.exit_code == 0
        assert "--limit" in result.output

    def test_serve_help(self) -> None:
        """Test serve command help."""
        runner = CliRunner()
        result = runner.invoke(main, ["serve", "--help"])

        assert result.exit_code == 0
        assert "--port" in result.output

    def test_locators_day(self, data_dir: Path) -> None:
        """Test locators lists the 24 hourly units of a day."""
        runner = CliRunner()
        result = runner.invoke(main, ["locators", "2024-01-01"])

        assert result.exit_code == 0
        assert "v2-2024-01-01" in result.output
        assert "https://hours.test/api/2024-01-01-23" in result.output
        assert "24 locators" in result.output

    def test_locators_invalid(self, data_dir: Path) -> None:
        """Test locators rejects bad identifiers."""
        runner = CliRunner()
        result = runner.invoke(main, ["locators", "2024-W53"])

        assert result.exit_code != 0
        assert "Invalid week format" in result.output

    def test_get_cached_month(self, data_dir: Path) -> None:
        """Test get serves a cached month without fetching."""
        cache_dir = data_dir / "cache"
        cache_dir.mkdir(parents=True)
        (cache_dir / "month-v1-2024-02.json").write_bytes(b'{"x":10,"y":3}')

        runner = CliRunner()
        result = runner.invoke(main, ["get", "2024-02", "--limit", "1"])

        assert result.exit_code == 0
        assert '"x": 10' in result.output
        assert '"y"' not in result.output

    def test_keys_empty(self, data_dir: Path) -> None:
        """Test keys with nothing cached."""
        runner = CliRunner()
        result = runner.invoke(main, ["keys"])

        assert result.exit_code == 0
        assert "No cached periods" in result.output

    def test_keys_lists_entries(self, data_dir: Path) -> None:
        """Test keys lists stored periods."""
        cache_dir = data_dir / "cache"
        cache_dir.mkdir(parents=True)
        (cache_dir / "2024-W5.json").write_bytes(b"{}")

        runner = CliRunner()
        result = runner.invoke(main, ["keys"])

        assert result.exit_code == 0
        assert "2024-W5" in result.output
