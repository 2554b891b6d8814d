"""In-memory ledger store."""

from ledger_migrate.ledger.base import apply_filter
from ledger_migrate.migrations.models import LedgerEntry, LedgerFilter


class MemoryLedgerStore:
    """List-backed ledger, lost when the process exits.

    Useful when the host application keeps its own persistence and only
    needs ordering and bookkeeping during a single process, and in tests.
    """

    def __init__(self, entries: list[LedgerEntry] | None = None) -> None:
        self._entries: list[LedgerEntry] = list(entries or [])

    async def find(self, filter: LedgerFilter | None = None) -> list[LedgerEntry]:
        return apply_filter(self._entries, filter)

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        self._entries.append(entry)
        return entry

    async def destroy_all(self, name: str) -> int:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.name != name]
        return before - len(self._entries)
