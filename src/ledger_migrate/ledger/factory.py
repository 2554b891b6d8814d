"""Ledger backend factory.

Instantiates the LedgerStore implementation named by
``config.ledger.backend``.
"""

from ledger_migrate.config import LedgerConfig
from ledger_migrate.errors import ConfigurationError
from ledger_migrate.ledger.base import LedgerStore


def create_ledger_store(config: LedgerConfig) -> LedgerStore:
    """Create the ledger store for a configuration.

    Args:
        config: Ledger settings.

    Returns:
        An object implementing LedgerStore.

    Raises:
        ConfigurationError: If the backend is not supported.
    """
    if config.backend == "json":
        from ledger_migrate.ledger.json_store import JsonLedgerStore

        return JsonLedgerStore(config.resolved_path())
    if config.backend == "sqlite":
        from ledger_migrate.ledger.sqlite_store import SqliteLedgerStore

        return SqliteLedgerStore(config.resolved_path() or ":memory:", table=config.table)
    if config.backend == "memory":
        from ledger_migrate.ledger.memory import MemoryLedgerStore

        return MemoryLedgerStore()
    raise ConfigurationError(f"Unknown ledger backend: {config.backend}")
