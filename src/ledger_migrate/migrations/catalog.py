"""Migration script discovery and loading.

A catalog maps migration identifiers to script objects. Each script
exposes two entry points, ``up(context)`` and ``down(context)``, which
may be plain functions or coroutine functions. Returning normally means
success; raising means failure.

Scripts on disk are Python files named so that plain string ordering is
the intended run order, e.g. ``0001_create_users.py``:

    ```python
    def up(context):
        context.db.execute("CREATE TABLE users (id INTEGER PRIMARY KEY)")


    def down(context):
        context.db.execute("DROP TABLE users")
    ```
"""

import importlib.util
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol, runtime_checkable

from ledger_migrate.errors import InvalidScriptError, ScriptNotFoundError
from ledger_migrate.migrations.models import SCRIPT_SUFFIX, Direction, normalize_identifier

logger = logging.getLogger(__name__)

_SEQUENCE_PREFIX = re.compile(r"^(\d+)")

SCRIPT_TEMPLATE = '''"""{description}"""


def up(context):
    pass


def down(context):
    pass
'''


@runtime_checkable
class MigrationScript(Protocol):
    """A migration with forward and reverse entry points."""

    def up(self, context: Any) -> Any: ...

    def down(self, context: Any) -> Any: ...


class ScriptCatalog(Protocol):
    """Protocol for discovering and loading migration scripts."""

    def list_identifiers(self) -> list[str]:
        """Return all available identifiers in ascending order."""
        ...

    def load(self, identifier: str) -> MigrationScript:
        """Return the script registered under an identifier."""
        ...


def get_entry_point(script: Any, identifier: str, direction: Direction) -> Any:
    """Look up a script's entry point for a direction.

    Raises:
        InvalidScriptError: If the entry point is missing or not callable.
    """
    entry_point = getattr(script, direction.value, None)
    if not callable(entry_point):
        raise InvalidScriptError(identifier, f"missing callable '{direction.value}'")
    return entry_point


class RegistryCatalog:
    """In-memory catalog populated by the host application.

    Example:
        ```python
        catalog = RegistryCatalog()
        catalog.register("0001_initial", initial_migration)
        ```
    """

    def __init__(self, scripts: Mapping[str, Any] | None = None) -> None:
        self._scripts: dict[str, Any] = {}
        for identifier, script in (scripts or {}).items():
            self.register(identifier, script)

    def register(self, identifier: str, script: Any) -> None:
        """Register a script under a (normalized) identifier."""
        self._scripts[normalize_identifier(identifier)] = script

    def list_identifiers(self) -> list[str]:
        return sorted(self._scripts)

    def load(self, identifier: str) -> Any:
        try:
            return self._scripts[normalize_identifier(identifier)]
        except KeyError:
            raise ScriptNotFoundError(identifier) from None


class DirectoryCatalog:
    """Catalog backed by a directory of Python migration files.

    Attributes:
        migrations_dir: Directory containing migration scripts.
    """

    def __init__(self, migrations_dir: Path) -> None:
        self.migrations_dir = migrations_dir
        self._loaded: dict[str, ModuleType] = {}

    def _script_path(self, identifier: str) -> Path:
        return self.migrations_dir / f"{normalize_identifier(identifier)}{SCRIPT_SUFFIX}"

    def list_identifiers(self) -> list[str]:
        """List migration identifiers found in the directory.

        Returns:
            Normalized file stems, sorted ascending. Files starting with an
            underscore (such as ``__init__.py``) are skipped.

        Raises:
            FileNotFoundError: If the migrations directory does not exist.
        """
        if not self.migrations_dir.is_dir():
            raise FileNotFoundError(f"Migrations directory not found: {self.migrations_dir}")

        identifiers = [
            normalize_identifier(path.name)
            for path in self.migrations_dir.glob(f"*{SCRIPT_SUFFIX}")
            if path.is_file() and not path.name.startswith("_")
        ]
        logger.debug(f"Found {len(identifiers)} candidate scripts in {self.migrations_dir}")
        return sorted(identifiers)

    def load(self, identifier: str) -> ModuleType:
        """Import a migration file as a module.

        Modules are cached per catalog, so repeated runs reuse the same
        module object.

        Raises:
            ScriptNotFoundError: If no file exists for the identifier.
            InvalidScriptError: If the module lacks up/down entry points.
        """
        identifier = normalize_identifier(identifier)
        if identifier in self._loaded:
            return self._loaded[identifier]

        path = self._script_path(identifier)
        if not path.is_file():
            raise ScriptNotFoundError(identifier)

        safe_name = re.sub(r"\W", "_", identifier)
        spec = importlib.util.spec_from_file_location(f"_ledger_migrate_{safe_name}", path)
        if spec is None or spec.loader is None:
            raise InvalidScriptError(identifier, f"cannot import {path}")

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        for direction in Direction:
            get_entry_point(module, identifier, direction)

        self._loaded[identifier] = module
        return module

    def create(self, name: str) -> Path:
        """Write a new, empty migration script.

        The file gets the next zero-padded sequence number after the
        highest existing one, e.g. ``0004_add_index.py``.

        Args:
            name: Free-form description; converted to a snake_case slug.

        Returns:
            Path of the created file.
        """
        slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
        if not slug:
            raise ValueError(f"Cannot derive a script name from {name!r}")

        self.migrations_dir.mkdir(parents=True, exist_ok=True)
        sequence = 0
        for identifier in self.list_identifiers():
            match = _SEQUENCE_PREFIX.match(identifier)
            if match:
                sequence = max(sequence, int(match.group(1)))

        path = self.migrations_dir / f"{sequence + 1:04d}_{slug}{SCRIPT_SUFFIX}"
        path.write_text(SCRIPT_TEMPLATE.format(description=name.strip()))
        logger.info(f"Created migration script {path}")
        return path
