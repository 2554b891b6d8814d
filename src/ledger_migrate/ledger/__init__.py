"""Ledger storage for applied migrations.

The ledger is the only record of which migrations are applied. Stores
implement the async LedgerStore protocol:

    ```python
    from ledger_migrate.ledger import JsonLedgerStore

    store = JsonLedgerStore(Path(".ledger-migrate/ledger.json"))
    entries = await store.find()
    ```
"""

from ledger_migrate.ledger.base import LedgerStore, apply_filter
from ledger_migrate.ledger.factory import create_ledger_store
from ledger_migrate.ledger.json_store import JsonLedgerStore
from ledger_migrate.ledger.memory import MemoryLedgerStore
from ledger_migrate.ledger.sqlite_store import SqliteLedgerStore

__all__ = [
    "JsonLedgerStore",
    "LedgerStore",
    "MemoryLedgerStore",
    "SqliteLedgerStore",
    "apply_filter",
    "create_ledger_store",
]
