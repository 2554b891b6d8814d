"""Data models for the migration system.

This module defines Pydantic models for ledger entries, ledger queries,
run reports, and status snapshots, plus the identifier normalization
shared by discovery and resolution.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

SCRIPT_SUFFIX = ".py"


def normalize_identifier(name: str) -> str:
    """Normalize a migration name to the identifier stored in the ledger.

    Discovered file names, registry keys, and user-supplied targets all pass
    through here so that "0002_users.py" and "0002_users" compare equal.

    Args:
        name: Raw migration name or file name.

    Returns:
        The identifier with surrounding whitespace and a trailing ``.py``
        removed.
    """
    name = name.strip()
    if name.endswith(SCRIPT_SUFFIX):
        name = name[: -len(SCRIPT_SUFFIX)]
    return name


class Direction(str, Enum):
    """Direction of a migration run."""

    UP = "up"
    DOWN = "down"


class SortOrder(str, Enum):
    """Ordering of ledger query results by name."""

    ASC = "asc"
    DESC = "desc"


class LedgerEntry(BaseModel):
    """Record of an applied migration.

    Attributes:
        name: Migration identifier that was applied.
        ran_at: When the forward action completed.
    """

    name: str = Field(..., description="Migration identifier")
    ran_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the migration was applied",
    )


class LedgerFilter(BaseModel):
    """Query over ledger entries.

    Attributes:
        order: Sort order by name.
        gte: Only entries with name >= this value.
        lte: Only entries with name <= this value.
    """

    order: SortOrder = Field(default=SortOrder.ASC, description="Sort order by name")
    gte: str | None = Field(default=None, description="Inclusive lower bound on name")
    lte: str | None = Field(default=None, description="Inclusive upper bound on name")

    def matches(self, name: str) -> bool:
        """Check whether a name falls inside the filter's range."""
        if self.gte is not None and name < self.gte:
            return False
        if self.lte is not None and name > self.lte:
            return False
        return True


class LedgerState(BaseModel):
    """On-disk document for file-backed ledgers."""

    version: int = Field(default=1, description="Document format version")
    entries: list[LedgerEntry] = Field(default_factory=list, description="Applied migrations")


class RunReport(BaseModel):
    """Outcome of a successful migration run.

    Attributes:
        direction: Direction of the run.
        target: Boundary identifier, or None for an unbounded run.
        executed: Identifiers executed, in execution order.
        duration_seconds: Wall-clock time of the whole run.
    """

    direction: Direction
    target: str | None = None
    executed: list[str] = Field(default_factory=list)
    duration_seconds: float = 0.0


class MigrationStatus(BaseModel):
    """Snapshot of ledger contents against available scripts.

    Attributes:
        applied: Ledger entries in ascending name order.
        pending: Available identifiers with no ledger entry.
        missing: Ledger identifiers with no available script.
    """

    applied: list[LedgerEntry] = Field(default_factory=list)
    pending: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
