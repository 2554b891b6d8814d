"""Migration runner.

This module provides the Migrator class which resolves the migrations a
run needs, executes them one at a time, and keeps the ledger in step
with each completed script.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

from ledger_migrate.errors import MigrationAlreadyRunningError
from ledger_migrate.events import EventEmitter, Listener
from ledger_migrate.migrations.catalog import get_entry_point
from ledger_migrate.migrations.models import (
    Direction,
    LedgerEntry,
    MigrationStatus,
    RunReport,
    normalize_identifier,
)
from ledger_migrate.migrations.resolver import MigrationResolver

if TYPE_CHECKING:
    from ledger_migrate.ledger.base import LedgerStore
    from ledger_migrate.migrations.catalog import ScriptCatalog

logger = logging.getLogger(__name__)

RunCallback = Callable[[BaseException | None, RunReport | None], Any]


def _validate_target(target: Any) -> str | None:
    """Check a target argument before any asynchronous work starts."""
    if target is None or target == "":
        return None
    if not isinstance(target, str):
        raise TypeError(f"The target argument must be a string, not {type(target).__name__}")
    if not normalize_identifier(target):
        raise ValueError(f"Invalid migration target: {target!r}")
    return target


def _validate_direction(direction: Any) -> Direction:
    if not isinstance(direction, str):
        raise TypeError(
            f"The direction argument must be a string, not {type(direction).__name__}"
        )
    return Direction(direction)


class Migrator:
    """Runs migrations against a ledger, one run at a time.

    Only one run may be in progress per Migrator. A second request made
    while a run is active is rejected with MigrationAlreadyRunningError and
    leaves the ledger and the active run untouched.

    Within a run, scripts execute strictly in resolver order and each
    script's ledger update completes before the next script starts. The
    first failure stops the run; scripts already completed in that run
    are not reverted.

    Events:
        complete: A run finished without errors.
        error: A run failed; listeners receive the exception.
        progress: Human-readable progress messages.

    Example:
        ```python
        migrator = Migrator(JsonLedgerStore(), DirectoryCatalog(Path("migrations")))

        report = await migrator.migrate_to()
        print(f"Applied {len(report.executed)} migrations")

        await migrator.rollback_to("0001_initial")
        ```
    """

    def __init__(
        self,
        store: "LedgerStore",
        catalog: "ScriptCatalog",
        context: Any = None,
        events: EventEmitter | None = None,
    ) -> None:
        """Initialize the migrator.

        Args:
            store: Ledger of applied migrations.
            catalog: Source of migration scripts.
            context: Object passed to every script entry point.
            events: Event emitter to notify; a private one by default.
        """
        self.store = store
        self.catalog = catalog
        self.context = context
        self.events = events or EventEmitter()
        self.resolver = MigrationResolver(store, catalog)
        self._run_lock = asyncio.Lock()

    @property
    def is_migrating(self) -> bool:
        """Whether a run is currently in progress."""
        return self._run_lock.locked()

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe to a run event."""
        self.events.on(event, listener)

    def set_progress_callback(self, callback: Callable[[str], None] | None) -> None:
        """Replace all progress listeners with a single callback.

        Args:
            callback: Function to call with progress messages, or None.
        """
        for listener in self.events.listeners("progress"):
            self.events.off("progress", listener)
        if callback is not None:
            self.events.on("progress", callback)

    def _log(self, message: str) -> None:
        """Log a message and emit it as progress."""
        logger.info(message)
        self.events.emit("progress", message)

    async def find_scripts_to_run(
        self, direction: Direction | str, target: str | None = None
    ) -> list[str]:
        """Resolve the identifiers a run would execute, in order."""
        return await self.resolver.find_scripts_to_run(Direction(direction), target)

    def migrate_to(
        self, target: str | None = None, callback: RunCallback | None = None
    ) -> Coroutine[Any, Any, RunReport]:
        """Apply pending migrations up to and including a target.

        Args:
            target: Last identifier to apply. None applies everything.
            callback: Called as ``callback(error, report)`` when the run ends.

        Returns:
            Awaitable resolving to the RunReport, or raising the failure.

        Raises:
            TypeError: Immediately, if target is not a string.
        """
        return self.migrate(Direction.UP, target, callback)

    def rollback_to(
        self, target: str | None = None, callback: RunCallback | None = None
    ) -> Coroutine[Any, Any, RunReport]:
        """Roll back applied migrations down to, but excluding, a target.

        Args:
            target: Identifier to keep applied. None rolls back everything.
                A target with no ledger entry is rolled back on its own.
            callback: Called as ``callback(error, report)`` when the run ends.

        Returns:
            Awaitable resolving to the RunReport, or raising the failure.

        Raises:
            TypeError: Immediately, if target is not a string.
        """
        return self.migrate(Direction.DOWN, target, callback)

    def migrate(
        self,
        direction: Direction | str = Direction.UP,
        target: str | None = None,
        callback: RunCallback | None = None,
    ) -> Coroutine[Any, Any, RunReport]:
        """Run migrations in a direction.

        Arguments are validated before the returned coroutine is created,
        so invalid input raises here rather than when awaited.

        Raises:
            TypeError: If direction or target is not a string.
            ValueError: If direction is not "up" or "down".
        """
        direction = _validate_direction(direction)
        target = _validate_target(target)
        return self._run(direction, target, callback)

    async def _run(
        self, direction: Direction, target: str | None, callback: RunCallback | None
    ) -> RunReport:
        if self._run_lock.locked():
            msg = "Unable to start migrations: already running"
            logger.warning(msg)
            raise MigrationAlreadyRunningError(msg)

        started = time.perf_counter()
        report = RunReport(direction=direction, target=target)
        error: Exception | None = None

        async with self._run_lock:
            try:
                scripts_to_run = await self.find_scripts_to_run(direction, target)

                if scripts_to_run:
                    self._log(f"Running migrations: {scripts_to_run}")
                    for identifier in scripts_to_run:
                        await self.run_script(identifier, direction)
                        report.executed.append(identifier)
                else:
                    self._log("No new migrations to run.")
                    self.events.emit("complete")
            except Exception as e:
                error = e

        report.duration_seconds = time.perf_counter() - started
        return self._finish(error, report, callback)

    def _finish(
        self, error: Exception | None, report: RunReport, callback: RunCallback | None
    ) -> RunReport:
        if error is not None:
            logger.error(f"Migrations did not complete. An error was encountered: {error}")
            self.events.emit("error", error)
        else:
            self._log("All migrations have run without any errors.")
            self.events.emit("complete")

        logger.info(f"Total migration time was {report.duration_seconds:.3f}s")

        if callback is not None:
            callback(error, None if error is not None else report)

        if error is not None:
            raise error
        return report

    async def run_script(self, identifier: str, direction: Direction | str) -> None:
        """Execute one migration and update the ledger.

        UP records a new ledger entry; DOWN deletes every entry with the
        identifier. Nothing is written if the entry point raises. If the
        entry point succeeds but the ledger write fails, the error is raised
        and the ledger no longer matches what was executed.

        Args:
            identifier: Migration to execute.
            direction: Which entry point to call.
        """
        direction = Direction(direction)
        started = time.perf_counter()
        self._log(f"{identifier} running.")

        try:
            script = self.catalog.load(identifier)
            entry_point = get_entry_point(script, identifier, direction)

            result = entry_point(self.context)
            if inspect.isawaitable(result):
                await result

            if direction == Direction.UP:
                await self.store.create(LedgerEntry(name=identifier))
            else:
                await self.store.destroy_all(identifier)
        except Exception:
            logger.exception(f"{identifier} error")
            raise

        elapsed = time.perf_counter() - started
        self._log(f"{identifier} finished successfully. Migration time was {elapsed:.3f}s")

    async def get_status(self) -> MigrationStatus:
        """Compare the ledger with the available scripts.

        Returns:
            Applied entries, pending identifiers, and identifiers recorded
            in the ledger whose scripts are no longer available.
        """
        applied = await self.store.find()
        available = self.catalog.list_identifiers()

        applied_names = {entry.name for entry in applied}
        available_names = set(available)

        return MigrationStatus(
            applied=applied,
            pending=[name for name in available if name not in applied_names],
            missing=sorted(applied_names - available_names),
        )
