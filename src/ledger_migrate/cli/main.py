"""Command-line interface for ledger-migrate."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from ledger_migrate.__version__ import __version__
from ledger_migrate.config import MigrateConfig, load_config
from ledger_migrate.errors import LedgerMigrateError


def _build_migrator(config: MigrateConfig):
    from ledger_migrate.ledger import create_ledger_store
    from ledger_migrate.migrations import DirectoryCatalog, Migrator

    migrator = Migrator(
        create_ledger_store(config.ledger),
        DirectoryCatalog(config.migrations_dir),
        context=config,
    )
    migrator.set_progress_callback(click.echo)
    return migrator


def _close(migrator) -> None:
    """Release the ledger store, if it holds a connection."""
    close = getattr(migrator.store, "close", None)
    if close is not None:
        close()


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="LEDGER_MIGRATE_CONFIG",
    help="Config file (default: ./ledger-migrate.yaml if present)",
)
@click.option(
    "--migrations-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="LEDGER_MIGRATE_DIR",
    help="Directory containing migration scripts",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context, config_path: Path | None, migrations_dir: Path | None, verbose: bool
) -> None:
    """Ledger-tracked migrations.

    Applies and rolls back ordered migration scripts, recording each
    applied script in a ledger so reruns only execute what is new.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )

    try:
        config = load_config(config_path)
    except LedgerMigrateError as e:
        _fail(e)

    if migrations_dir is not None:
        config.migrations_dir = migrations_dir
    ctx.obj = config


@main.command()
@click.argument("target", required=False)
@click.option("--dry-run", is_flag=True, help="Show what would run without making changes")
@click.pass_obj
def up(config: MigrateConfig, target: str | None, dry_run: bool) -> None:
    """Apply pending migrations, up to and including TARGET."""
    _run(config, "up", target, dry_run)


@main.command()
@click.argument("target", required=False)
@click.option("--dry-run", is_flag=True, help="Show what would run without making changes")
@click.pass_obj
def down(config: MigrateConfig, target: str | None, dry_run: bool) -> None:
    """Roll back applied migrations, down to but excluding TARGET.

    Without TARGET every applied migration is rolled back. A TARGET that
    was never recorded as applied is rolled back on its own, which
    recovers from a migration that failed halfway.
    """
    _run(config, "down", target, dry_run)


def _run(config: MigrateConfig, direction: str, target: str | None, dry_run: bool) -> None:
    migrator = _build_migrator(config)

    try:
        if dry_run:
            plan = asyncio.run(migrator.find_scripts_to_run(direction, target))
            if not plan:
                click.echo("No migrations to run.")
                return
            verb = "apply" if direction == "up" else "roll back"
            click.echo(f"Would {verb} {len(plan)} migration(s):")
            for name in plan:
                click.echo(f"  - {name}")
            return

        if direction == "up":
            report = asyncio.run(migrator.migrate_to(target))
        else:
            report = asyncio.run(migrator.rollback_to(target))
    except Exception as e:
        _fail(e)
    finally:
        _close(migrator)

    verb = "Applied" if direction == "up" else "Rolled back"
    click.echo(f"{verb} {len(report.executed)} migration(s) in {report.duration_seconds:.2f}s.")


@main.command()
@click.pass_obj
def status(config: MigrateConfig) -> None:
    """Show applied, pending, and missing migrations."""
    migrator = _build_migrator(config)

    try:
        result = asyncio.run(migrator.get_status())
    except Exception as e:
        _fail(e)
    finally:
        _close(migrator)

    click.echo("Migration Status:")
    click.echo(f"  Migrations dir: {config.migrations_dir}")
    click.echo(f"  Ledger: {config.ledger.backend}")
    click.echo(f"  Applied: {len(result.applied)}")
    click.echo(f"  Pending: {len(result.pending)}")
    click.echo("")

    if result.applied:
        click.echo("Applied migrations:")
        for entry in result.applied:
            click.echo(f"  - {entry.name} applied at {entry.ran_at.isoformat()}")
        click.echo("")

    if result.missing:
        click.echo("Applied but missing from the migrations dir:")
        for name in result.missing:
            click.echo(f"  - {name}")
        click.echo("")

    if result.pending:
        click.echo("Pending migrations:")
        for name in result.pending:
            click.echo(f"  - {name}")
        click.echo("")
        click.echo("Run 'ledger-migrate up' to apply pending migrations.")
    else:
        click.echo("All migrations applied.")


@main.command()
@click.argument("name")
@click.pass_obj
def create(config: MigrateConfig, name: str) -> None:
    """Create a new migration script named NAME."""
    from ledger_migrate.migrations import DirectoryCatalog

    try:
        path = DirectoryCatalog(config.migrations_dir).create(name)
    except (OSError, ValueError) as e:
        _fail(e)

    click.echo(f"Created {path}")


if __name__ == "__main__":
    main()
