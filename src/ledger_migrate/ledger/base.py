"""Ledger store interface."""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from ledger_migrate.migrations.models import LedgerEntry, LedgerFilter, SortOrder


@runtime_checkable
class LedgerStore(Protocol):
    """Protocol for the persisted set of applied migrations."""

    async def find(self, filter: LedgerFilter | None = None) -> list[LedgerEntry]:
        """Return entries matching the filter, ordered by name."""
        ...

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """Insert an entry and return it."""
        ...

    async def destroy_all(self, name: str) -> int:
        """Delete every entry with the given name and return the count."""
        ...


def apply_filter(entries: Iterable[LedgerEntry], filter: LedgerFilter | None) -> list[LedgerEntry]:
    """Select and order entries in memory.

    Args:
        entries: Candidate entries in any order.
        filter: Range and order to apply. None means all, ascending.

    Returns:
        Matching entries sorted by name.
    """
    filter = filter or LedgerFilter()
    selected = [e for e in entries if filter.matches(e.name)]
    return sorted(selected, key=lambda e: e.name, reverse=filter.order == SortOrder.DESC)
