"""Resolution of the migrations a run must execute.

Forward runs diff the available scripts against the ledger, so a rerun
with nothing new is a no-op. Rollbacks replay the ledger in reverse and
never consult the catalog, so a script can be rolled back as long as it
is recorded.
"""

import logging
from typing import TYPE_CHECKING

from ledger_migrate.migrations.models import (
    Direction,
    LedgerFilter,
    SortOrder,
    normalize_identifier,
)

if TYPE_CHECKING:
    from ledger_migrate.ledger.base import LedgerStore
    from ledger_migrate.migrations.catalog import ScriptCatalog

logger = logging.getLogger(__name__)


class MigrationResolver:
    """Computes the ordered plan for a direction and optional target.

    Attributes:
        store: Ledger of applied migrations.
        catalog: Source of available migration identifiers.
    """

    def __init__(self, store: "LedgerStore", catalog: "ScriptCatalog") -> None:
        self.store = store
        self.catalog = catalog

    async def find_scripts_to_run(
        self, direction: Direction, target: str | None = None
    ) -> list[str]:
        """Resolve the identifiers to execute, in execution order.

        Args:
            direction: UP to apply, DOWN to roll back.
            target: Boundary identifier. Empty or None means no boundary.
                UP includes the target; DOWN stops just above it.

        Returns:
            Ascending identifiers for UP, descending for DOWN. A DOWN
            target that has no ledger entry yields ``[target]`` alone, so a
            migration that failed before being recorded can still be
            rolled back.

        Raises:
            ValueError: If a non-empty target is blank once normalized.
        """
        direction = Direction(direction)
        if target:
            normalized = normalize_identifier(target)
            if not normalized:
                raise ValueError(f"Invalid migration target: {target!r}")
            target = normalized
        else:
            target = ""
        logger.debug(f"find_scripts_to_run direction:{direction.value}, to:{target or None}")

        try:
            if direction == Direction.DOWN:
                return await self._find_rollbacks(target)
            return await self._find_pending(target)
        except Exception:
            logger.exception("Error retrieving migrations")
            raise

    async def _find_pending(self, target: str) -> list[str]:
        filter = LedgerFilter(order=SortOrder.ASC, lte=target or None)
        already_ran = {entry.name for entry in await self.store.find(filter)}
        logger.debug(f"scripts already ran: {sorted(already_ran)}")

        candidates = self.catalog.list_identifiers()
        logger.debug(f"Found {len(candidates)} candidate scripts: {candidates}")

        if target:
            candidates = [name for name in candidates if name <= target]

        scripts_to_run = sorted(name for name in candidates if name not in already_ran)
        logger.debug(f"Found scripts to run: {scripts_to_run}")
        return scripts_to_run

    async def _find_rollbacks(self, target: str) -> list[str]:
        filter = LedgerFilter(order=SortOrder.DESC, gte=target or None)
        already_ran = [entry.name for entry in await self.store.find(filter)]
        logger.debug(f"scripts already ran: {already_ran}")

        if target and target not in already_ran:
            logger.debug(f"{target} has not run; returning it as a standalone rollback")
            return [target]

        # The target itself sorts last; keep it applied.
        if target and already_ran:
            already_ran.pop()

        logger.debug(f"Found scripts to run: {already_ran}")
        return already_ran
