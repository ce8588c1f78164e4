"""Tests for the command line interface."""

import pytest

from wellness_insights.cli import build_parser, main
from wellness_insights.config import get_settings


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the CLI at a temporary database."""
    monkeypatch.setenv("WELLNESS_DB_PATH", str(tmp_path / "cli.db"))
    monkeypatch.delenv("WELLNESS_ANALYSIS_SERVICE_URL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["journal"])

        assert args.user == "local"
        assert args.range == "weekly"
        assert args.limit == 5

    def test_rejects_unknown_mood(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["log-mood", "ecstatic"])


class TestCommands:
    """Tests for running commands end to end."""

    def test_no_command(self):
        assert main([]) == 1

    def test_log_and_show_mood(self, capsys):
        assert main(["log-mood", "great"]) == 0
        assert "Saved mood 'great'" in capsys.readouterr().out

        assert main(["mood"]) == 0
        out = capsys.readouterr().out
        assert "Today: great" in out
        assert "Last 7 Days" in out

    def test_write_and_list_journal(self, capsys):
        assert main(["journal", "--write", "Walked to the lake"]) == 0
        assert "Saved journal entry (neutral, mood okay)" in capsys.readouterr().out

        assert main(["journal", "--range", "monthly"]) == 0
        out = capsys.readouterr().out
        assert "Walked to the lake" in out
        assert "Week 4" in out

    def test_analyze_without_service(self, capsys):
        assert main(["journal", "--write", "Long day", "--analyze"]) == 1
        assert "analysis_service_url" in capsys.readouterr().out

    def test_log_wellness(self, capsys):
        assert main(["log-wellness", "sleep", "7.5"]) == 0
        assert "sleep 7.5 h" in capsys.readouterr().out

        assert main(["wellness"]) == 0
        assert "Days logged: 1" in capsys.readouterr().out

    def test_log_wellness_out_of_range(self, capsys):
        assert main(["log-wellness", "water", "25"]) == 1
        assert "Maximum value is 20" in capsys.readouterr().out

    def test_exercises(self, capsys):
        assert main(["--user", "ana", "exercises", "--complete", "box-breathing", "--duration", "60"]) == 0
        out = capsys.readouterr().out
        assert "Completed box-breathing" in out
        assert "First Step" in out

    def test_delete_journal_entry(self, capsys):
        assert main(["journal", "--write", "Keep this"]) == 0
        assert main(["journal", "--write", "Drop this"]) == 0
        capsys.readouterr()

        assert main(["journal", "--delete", "2"]) == 0
        assert "Deleted journal entry 2" in capsys.readouterr().out

        assert main(["journal"]) == 0
        out = capsys.readouterr().out
        assert "Keep this" in out
        assert "Drop this" not in out

    def test_delete_missing_journal_entry(self, capsys):
        assert main(["journal", "--delete", "42"]) == 1
        assert "Journal entry '42' not found" in capsys.readouterr().out

    def test_stats(self, capsys):
        assert main(["stats"]) == 0
        out = capsys.readouterr().out
        assert "Database:" in out
        assert "Date range" not in out

        main(["log-mood", "good"])
        main(["journal", "--write", "Short walk"])
        capsys.readouterr()

        assert main(["stats"]) == 0
        out = capsys.readouterr().out
        assert "journal" in out
        assert "exercise" in out
        assert "Date range:" in out
