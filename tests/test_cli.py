"""
Tests for CLI argument handling in cli.py.

Uses monkeypatch to intercept save_csvs so the tests can check which output
directory and records the CLI hands over, without depending on the CSV layout.

Run: uv run pytest tests/test_cli.py -v
"""

from pathlib import Path

import pytest

from job_gender_network.cli import main
from job_gender_network.config import DEFAULT_DATA_DIR

# ── Helpers ──────────────────────────────────────────────────────────────────


@pytest.fixture
def table(tmp_path) -> Path:
    path = tmp_path / "male-flight-attendants.tsv"
    path.write_text(
        "Occupation\tMale\n"
        "Kindergarten and earlier school teachers\t2.3\n"
        "Flight attendants\t24.6\n"
        "Pilots\t94.1\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def mock_save(monkeypatch):
    """Patch save_csvs to capture its arguments."""
    calls = []

    def fake_save(output_dir, output_name, records):
        calls.append({"output_dir": output_dir, "output_name": output_name, "records": records})
        return output_dir / f"{output_name}_categories.csv"

    monkeypatch.setattr("job_gender_network.cli.save_csvs", fake_save)
    return calls


# ── Default arguments ────────────────────────────────────────────────────────


class TestDefaultArgs:
    """With no arguments the CLI reads the default file from the working directory."""

    def test_reads_default_file(self, table, mock_save, monkeypatch):
        monkeypatch.chdir(table.parent)
        main([])
        assert len(mock_save[0]["records"]) == 3

    def test_default_output_dir(self, table, mock_save, monkeypatch):
        monkeypatch.chdir(table.parent)
        main([])
        assert mock_save[0]["output_dir"] == DEFAULT_DATA_DIR / "male-flight-attendants"
        assert mock_save[0]["output_name"] == "male-flight-attendants"

    def test_missing_default_file_raises(self, tmp_path, mock_save, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(FileNotFoundError):
            main([])


# ── Explicit arguments ───────────────────────────────────────────────────────


class TestExplicitArgs:
    """Input path and output directory overrides."""

    def test_explicit_input(self, table, mock_save):
        main([str(table)])
        assert [r.name for r in mock_save[0]["records"]][-1] == "Pilots"

    def test_output_flag(self, table, mock_save, tmp_path):
        out = tmp_path / "out"
        main([str(table), "-o", str(out)])
        assert mock_save[0]["output_dir"] == out

    def test_no_export(self, table, mock_save):
        main([str(table), "--no-export"])
        assert mock_save == []

    def test_prints_summary(self, table, mock_save, capsys):
        main([str(table), "--no-export"])
        out = capsys.readouterr().out
        assert "Loaded 3 job categories" in out
        assert "2.3 - 94.1" in out


# ── End to end ───────────────────────────────────────────────────────────────


class TestWritesCsv:
    def test_writes_real_file(self, table, tmp_path):
        out = tmp_path / "export"
        main([str(table), "--output", str(out)])
        assert (out / "male-flight-attendants_categories.csv").exists()
