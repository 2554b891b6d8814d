"""Ledger-tracked migration system.

This package resolves which migration scripts a run must execute and runs
them in order, recording each applied script in a ledger.

Example usage:
    ```python
    from ledger_migrate.ledger import JsonLedgerStore
    from ledger_migrate.migrations import DirectoryCatalog, Migrator

    migrator = Migrator(JsonLedgerStore(), DirectoryCatalog(Path("migrations")))

    # Apply everything pending
    report = await migrator.migrate_to()
    print(f"Applied {len(report.executed)} migrations")

    # Roll back everything after 0001_initial
    await migrator.rollback_to("0001_initial")
    ```
"""

from ledger_migrate.migrations.models import (
    Direction,
    LedgerEntry,
    LedgerFilter,
    MigrationStatus,
    RunReport,
    SortOrder,
    normalize_identifier,
)
from ledger_migrate.migrations.catalog import (
    DirectoryCatalog,
    MigrationScript,
    RegistryCatalog,
    ScriptCatalog,
)
from ledger_migrate.migrations.resolver import MigrationResolver
from ledger_migrate.migrations.runner import Migrator

__all__ = [
    "Direction",
    "DirectoryCatalog",
    "LedgerEntry",
    "LedgerFilter",
    "MigrationResolver",
    "MigrationScript",
    "MigrationStatus",
    "Migrator",
    "RegistryCatalog",
    "RunReport",
    "ScriptCatalog",
    "SortOrder",
    "normalize_identifier",
]
