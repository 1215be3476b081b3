"""End-to-end tests for the command-line interface."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

from cli.__main__ import main
from cli.transactions import parse_bound


@pytest.fixture
def cli_home(monkeypatch, tmp_path):
    """Point the config file and data directory at a temporary home."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    yield tmp_path
    logging.getLogger("tally").handlers.clear()


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["cli", *argv])
    main()


class TestParseBound:
    """Tests for --start/--end parsing."""

    def test_timestamp_kept_as_is(self):
        bound = parse_bound("2025-03-01T12:30:00+00:00", end=True)

        assert bound == datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc)

    def test_date_end_bound_covers_whole_day(self):
        bound = parse_bound("2025-03-01", end=True)

        assert (bound.hour, bound.minute, bound.microsecond) == (23, 59, 999999)
        assert bound.tzinfo is not None

    def test_date_start_bound_is_midnight(self):
        bound = parse_bound("2025-03-01")

        assert (bound.hour, bound.minute) == (0, 0)

    def test_none(self):
        assert parse_bound(None) is None


class TestCli:
    """Tests running the CLI against a temporary database."""

    def test_record_and_report(self, cli_home, monkeypatch, caplog):
        """Test the flow from migration to a budget warning."""
        caplog.set_level(logging.INFO, logger="tally")

        run_cli(monkeypatch, "migrate", "apply")
        run_cli(
            monkeypatch,
            "budgets", "add", "--category", "food", "--limit", "50", "--period", "monthly",
        )
        run_cli(
            monkeypatch,
            "transactions", "add", "--type", "expense", "--amount", "60", "--category", "food",
        )
        run_cli(
            monkeypatch,
            "transactions", "add", "--type", "income", "--amount", "100", "--category", "food",
        )
        run_cli(monkeypatch, "transactions", "balance")

        assert "Budget exceeded for 'food'" in caplog.text
        assert "Balance: 40" in caplog.text

    def test_invalid_transaction_exits(self, cli_home, monkeypatch):
        """Test that a rejected transaction exits with status 1."""
        run_cli(monkeypatch, "migrate", "apply")

        with pytest.raises(SystemExit) as exc_info:
            run_cli(
                monkeypatch,
                "transactions", "add", "--type", "expense", "--amount", "5", "--category", "rent",
            )

        assert exc_info.value.code == 1

    def test_missing_schema_reports_error(self, cli_home, monkeypatch, capsys):
        """Test that using the ledger before migrating fails cleanly."""
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "transactions", "balance")

        assert "Error:" in capsys.readouterr().out
