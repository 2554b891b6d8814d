"""Shared pytest fixtures for ledger-migrate tests.

This module provides reusable fixtures for ledger stores, script
catalogs, and a migrator wired to record every entry point call.
"""

from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from ledger_migrate.ledger.memory import MemoryLedgerStore
from ledger_migrate.migrations.catalog import RegistryCatalog
from ledger_migrate.migrations.runner import Migrator

IDENTIFIERS = ["0001_initialize", "0002_somechanges", "0003_morechanges"]

# =============================================================================
# Script Fixtures
# =============================================================================


def make_script(
    name: str,
    calls: list[tuple[str, str]],
    fail_up: Exception | None = None,
    fail_down: Exception | None = None,
) -> SimpleNamespace:
    """Create a script whose entry points append (name, direction) to calls."""

    def up(context: Any) -> None:
        if fail_up is not None:
            raise fail_up
        calls.append((name, "up"))

    def down(context: Any) -> None:
        if fail_down is not None:
            raise fail_down
        calls.append((name, "down"))

    return SimpleNamespace(up=up, down=down)


@pytest.fixture
def identifiers() -> list[str]:
    """Identifiers of the standard three-script catalog."""
    return list(IDENTIFIERS)


@pytest.fixture
def script_factory() -> Callable[..., SimpleNamespace]:
    """Return the make_script helper."""
    return make_script


@pytest.fixture
def calls() -> list[tuple[str, str]]:
    """Ordered record of entry point invocations."""
    return []


@pytest.fixture
def catalog(calls: list[tuple[str, str]]) -> RegistryCatalog:
    """Create a registry catalog with three recording scripts."""
    return RegistryCatalog({name: make_script(name, calls) for name in IDENTIFIERS})


# =============================================================================
# Ledger Fixtures
# =============================================================================


@pytest.fixture
def store() -> MemoryLedgerStore:
    """Create an empty in-memory ledger."""
    return MemoryLedgerStore()


# =============================================================================
# Migrator Fixtures
# =============================================================================


@pytest.fixture
def migrator(store: MemoryLedgerStore, catalog: RegistryCatalog) -> Migrator:
    """Create a Migrator over the in-memory ledger and recording scripts."""
    return Migrator(store, catalog, context=SimpleNamespace(name="test-app"))


@pytest.fixture
def write_script() -> Callable[[Path, str], Path]:
    """Return a helper that writes a migration file appending to context.log."""

    def _write(migrations_dir: Path, name: str, body: str | None = None) -> Path:
        path = migrations_dir / f"{name}.py"
        path.write_text(
            body
            or (
                f"def up(context):\n"
                f"    context.log.append(({name!r}, 'up'))\n"
                f"\n\n"
                f"def down(context):\n"
                f"    context.log.append(({name!r}, 'down'))\n"
            )
        )
        return path

    return _write


@pytest.fixture
def migrations_dir(tmp_path: Path, write_script: Callable[[Path, str], Path]) -> Path:
    """Create a migrations directory holding the three standard scripts."""
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    for name in IDENTIFIERS:
        write_script(migrations, name)
    return migrations
