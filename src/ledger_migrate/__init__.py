"""ledger-migrate.

Ordered, ledger-tracked migrations: resolve which scripts must run for a
direction and target, then execute them one at a time while recording the
applied set.
"""

from ledger_migrate.__version__ import __version__
from ledger_migrate.migrations import Direction, LedgerEntry, Migrator, RunReport

__all__ = [
    "Direction",
    "LedgerEntry",
    "Migrator",
    "RunReport",
    "__version__",
]
