"""Tests for migration models."""

from datetime import datetime, timezone

import pytest

from ledger_migrate.migrations.models import (
    Direction,
    LedgerEntry,
    LedgerFilter,
    LedgerState,
    RunReport,
    SortOrder,
    normalize_identifier,
)


class TestNormalizeIdentifier:
    """Tests for the shared identifier normalization."""

    def test_strips_script_suffix(self):
        """Should drop a trailing .py so file names match ledger names."""
        assert normalize_identifier("0001_initial.py") == "0001_initial"

    def test_leaves_plain_identifier_unchanged(self):
        """Should return identifiers without a suffix as-is."""
        assert normalize_identifier("0001_initial") == "0001_initial"

    def test_strips_whitespace(self):
        """Should trim surrounding whitespace before removing the suffix."""
        assert normalize_identifier("  0002_users.py \n") == "0002_users"

    def test_only_trailing_suffix_removed(self):
        """Should not touch .py appearing inside the name."""
        assert normalize_identifier("0003_copy.py_files") == "0003_copy.py_files"


class TestDirection:
    """Tests for Direction enum."""

    def test_values(self):
        """Should use up/down as string values."""
        assert Direction.UP.value == "up"
        assert Direction.DOWN.value == "down"

    def test_from_string(self):
        """Should build from plain strings."""
        assert Direction("down") is Direction.DOWN

    def test_rejects_unknown(self):
        """Should reject unknown directions."""
        with pytest.raises(ValueError):
            Direction("sideways")


class TestLedgerEntry:
    """Tests for LedgerEntry model."""

    def test_default_ran_at_is_utc_now(self):
        """Should default ran_at to the current UTC time."""
        before = datetime.now(timezone.utc)
        entry = LedgerEntry(name="0001_initial")
        after = datetime.now(timezone.utc)

        assert entry.ran_at.tzinfo is not None
        assert before <= entry.ran_at <= after

    def test_parses_iso_timestamp(self):
        """Should parse ISO timestamps when loading persisted entries."""
        entry = LedgerEntry(name="0001_initial", ran_at="2026-02-13T15:30:00Z")
        assert entry.ran_at == datetime(2026, 2, 13, 15, 30, tzinfo=timezone.utc)


class TestLedgerFilter:
    """Tests for LedgerFilter range matching."""

    def test_defaults(self):
        """Should default to ascending with no bounds."""
        f = LedgerFilter()
        assert f.order == SortOrder.ASC
        assert f.gte is None
        assert f.lte is None
        assert f.matches("anything")

    def test_lte_is_inclusive(self):
        """Should include names equal to the upper bound."""
        f = LedgerFilter(lte="0002")
        assert f.matches("0001")
        assert f.matches("0002")
        assert not f.matches("0003")

    def test_gte_is_inclusive(self):
        """Should include names equal to the lower bound."""
        f = LedgerFilter(gte="0002")
        assert not f.matches("0001")
        assert f.matches("0002")
        assert f.matches("0003")

    def test_lexicographic_comparison(self):
        """Should compare names as strings, not numbers."""
        f = LedgerFilter(lte="9")
        assert f.matches("10")
        assert not LedgerFilter(lte="10").matches("9")


class TestLedgerState:
    """Tests for the file ledger document."""

    def test_empty_state(self):
        """Should default to an empty entry list."""
        state = LedgerState()
        assert state.version == 1
        assert state.entries == []

    def test_round_trip_json(self):
        """Should survive JSON serialization."""
        state = LedgerState(entries=[LedgerEntry(name="0001_initial")])
        restored = LedgerState.model_validate_json(state.model_dump_json())
        assert restored.entries[0].name == "0001_initial"


class TestRunReport:
    """Tests for RunReport model."""

    def test_defaults(self):
        """Should start with nothing executed."""
        report = RunReport(direction=Direction.UP)
        assert report.target is None
        assert report.executed == []
        assert report.duration_seconds == 0.0
