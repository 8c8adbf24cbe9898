"""Tests for the CLI commands."""

import pytest
from click.testing import CliRunner

from strategy_dashboard.cli import cli


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return CliRunner()


class TestCli:
    def test_summary(self, runner, workbook_file):
        result = runner.invoke(cli, ["--source", str(workbook_file), "summary"])
        assert result.exit_code == 0, result.output
        assert "Strategy: 4 records, 3 group(s)" in result.output
        assert "[3.2] 3.2 Curriculum Reform (2)" in result.output
        assert "Portfolios (3): Education, Health, Labour" in result.output

    def test_export_all(self, runner, workbook_file, tmp_path):
        out = tmp_path / "pdf"
        result = runner.invoke(cli, [
            "--source", str(workbook_file), "export", "--output-dir", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert (out / "dashboard-all.pdf").exists()

    def test_export_filtered(self, runner, workbook_file, tmp_path):
        out = tmp_path / "pdf"
        result = runner.invoke(cli, [
            "--source", str(workbook_file), "export", "--filtered",
            "--portfolio", "Health", "--output-dir", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert (out / "dashboard-filtered.pdf").exists()

    def test_export_no_matches(self, runner, workbook_file, tmp_path):
        result = runner.invoke(cli, [
            "--source", str(workbook_file), "export", "--filtered",
            "--search", "no such text", "--output-dir", str(tmp_path),
        ])
        assert result.exit_code == 0
        assert "Nothing to export" in result.output

    def test_load_failure(self, runner, tmp_path):
        result = runner.invoke(cli, ["--source", str(tmp_path / "missing.xlsx"), "summary"])
        assert result.exit_code == 1
        assert "Failed to load" in result.output

    def test_missing_settings_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["--settings", str(tmp_path / "nope.yaml"), "summary"])
        assert result.exit_code == 1
