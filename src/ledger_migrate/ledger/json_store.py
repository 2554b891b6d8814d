"""JSON file ledger store.

This module persists the applied-migrations ledger as a single JSON
document. The whole document is rewritten on every change.

Default Storage Location: ./.ledger-migrate/ledger.json

Each ledger entry is written independently: there is no transaction
spanning several entries, so an interrupted run leaves exactly the
entries of the steps that completed.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ledger_migrate.errors import LedgerError
from ledger_migrate.ledger.base import apply_filter
from ledger_migrate.migrations.models import LedgerEntry, LedgerFilter, LedgerState

logger = logging.getLogger(__name__)

LEDGER_DIR = Path(".ledger-migrate")
LEDGER_FILE = LEDGER_DIR / "ledger.json"


def get_ledger_path() -> Path:
    """Get the default JSON ledger path.

    Returns:
        Path to ledger.json in ./.ledger-migrate/ under the working directory.
    """
    return Path.cwd() / LEDGER_FILE


class JsonLedgerStore:
    """JSON-based storage for ledger entries.

    Attributes:
        ledger_path: Path to the ledger JSON file.

    Example:
        ```python
        store = JsonLedgerStore(Path("state/ledger.json"))

        await store.create(LedgerEntry(name="0001_initial"))
        applied = await store.find(LedgerFilter(order=SortOrder.DESC))
        ```
    """

    def __init__(self, ledger_path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            ledger_path: Custom path for the ledger file.
                Defaults to ./.ledger-migrate/ledger.json. The file and its
                directory are created on first write.
        """
        self.ledger_path = ledger_path or get_ledger_path()

    def _load_state(self) -> LedgerState:
        """Load the ledger document.

        Returns:
            Current ledger state, empty if the file does not exist yet.

        Raises:
            LedgerError: If the file exists but cannot be read or parsed.
        """
        if not self.ledger_path.exists():
            return LedgerState()

        try:
            content = self.ledger_path.read_text()
            return LedgerState.model_validate(json.loads(content))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise LedgerError(f"Failed to load ledger {self.ledger_path}: {e}") from e

    def _save_state(self, state: LedgerState) -> None:
        """Write the ledger document.

        Args:
            state: Ledger state to save.
        """
        try:
            self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
            self.ledger_path.write_text(state.model_dump_json(indent=2))
        except OSError as e:
            raise LedgerError(f"Failed to write ledger {self.ledger_path}: {e}") from e

    async def find(self, filter: LedgerFilter | None = None) -> list[LedgerEntry]:
        """Return entries matching the filter, ordered by name."""
        return apply_filter(self._load_state().entries, filter)

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """Append an entry to the ledger file."""
        state = self._load_state()
        state.entries.append(entry)
        self._save_state(state)
        logger.debug(f"Recorded {entry.name} in {self.ledger_path}")
        return entry

    async def destroy_all(self, name: str) -> int:
        """Remove every entry with the given name.

        Returns:
            Number of entries removed. The file is left untouched when zero.
        """
        state = self._load_state()
        kept = [e for e in state.entries if e.name != name]
        removed = len(state.entries) - len(kept)
        if removed:
            state.entries = kept
            self._save_state(state)
            logger.debug(f"Removed {removed} entr{'y' if removed == 1 else 'ies'} for {name}")
        return removed
