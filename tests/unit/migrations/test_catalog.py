"""Tests for migration script catalogs."""

from pathlib import Path
from types import ModuleType, SimpleNamespace

import pytest

from ledger_migrate.errors import InvalidScriptError, ScriptNotFoundError
from ledger_migrate.migrations.catalog import (
    DirectoryCatalog,
    MigrationScript,
    RegistryCatalog,
    get_entry_point,
)
from ledger_migrate.migrations.models import Direction


@pytest.mark.unit
class TestRegistryCatalog:
    """Tests for the in-memory registry."""

    def test_lists_sorted_identifiers(self):
        """Should list registered identifiers in ascending order."""
        catalog = RegistryCatalog({"0002_b": object(), "0001_a": object()})

        assert catalog.list_identifiers() == ["0001_a", "0002_b"]

    def test_register_normalizes_identifier(self):
        """Should store scripts under normalized identifiers."""
        script = object()
        catalog = RegistryCatalog()
        catalog.register("0001_a.py", script)

        assert catalog.list_identifiers() == ["0001_a"]
        assert catalog.load("0001_a") is script
        assert catalog.load("0001_a.py") is script

    def test_load_unknown(self):
        """Should raise ScriptNotFoundError for unknown identifiers."""
        with pytest.raises(ScriptNotFoundError) as exc_info:
            RegistryCatalog().load("0001_missing")

        assert exc_info.value.identifier == "0001_missing"


@pytest.mark.unit
class TestGetEntryPoint:
    """Tests for entry point lookup."""

    def test_returns_callable(self):
        """Should return the function for the direction."""
        script = SimpleNamespace(up=lambda ctx: "up", down=lambda ctx: "down")

        assert get_entry_point(script, "0001", Direction.DOWN)(None) == "down"

    def test_missing_entry_point(self):
        """Should reject scripts without the entry point."""
        with pytest.raises(InvalidScriptError, match="missing callable 'down'"):
            get_entry_point(SimpleNamespace(up=lambda ctx: None), "0001", Direction.DOWN)

    def test_non_callable_entry_point(self):
        """Should reject entry points that are not callable."""
        with pytest.raises(InvalidScriptError):
            get_entry_point(SimpleNamespace(up="nope", down=None), "0001", Direction.UP)


@pytest.mark.unit
class TestDirectoryCatalog:
    """Tests for directory-backed discovery and loading."""

    def test_list_identifiers(self, migrations_dir: Path, identifiers: list[str]):
        """Should list script stems in ascending order."""
        assert DirectoryCatalog(migrations_dir).list_identifiers() == identifiers

    def test_skips_private_and_non_python_files(self, migrations_dir: Path):
        """Should ignore __init__.py, underscore files, and other extensions."""
        (migrations_dir / "__init__.py").write_text("")
        (migrations_dir / "_helpers.py").write_text("")
        (migrations_dir / "README.md").write_text("docs")
        (migrations_dir / "0009_notes.txt").write_text("")

        identifiers = DirectoryCatalog(migrations_dir).list_identifiers()

        assert "__init__" not in identifiers
        assert "_helpers" not in identifiers
        assert len(identifiers) == 3

    def test_missing_directory(self, tmp_path: Path):
        """Should raise a read failure when the directory is missing."""
        with pytest.raises(FileNotFoundError):
            DirectoryCatalog(tmp_path / "nope").list_identifiers()

    def test_load_module(self, migrations_dir: Path):
        """Should import the script as a module with up/down."""
        module = DirectoryCatalog(migrations_dir).load("0001_initialize")

        assert isinstance(module, ModuleType)
        assert isinstance(module, MigrationScript)

        context = SimpleNamespace(log=[])
        module.up(context)
        assert context.log == [("0001_initialize", "up")]

    def test_load_is_cached(self, migrations_dir: Path):
        """Should return the same module object on repeated loads."""
        catalog = DirectoryCatalog(migrations_dir)

        assert catalog.load("0002_somechanges") is catalog.load("0002_somechanges.py")

    def test_load_unknown(self, migrations_dir: Path):
        """Should raise ScriptNotFoundError for identifiers with no file."""
        with pytest.raises(ScriptNotFoundError):
            DirectoryCatalog(migrations_dir).load("0099_missing")

    def test_load_invalid_script(self, migrations_dir: Path, write_script):
        """Should reject modules without a down function."""
        write_script(migrations_dir, "0004_broken", "def up(context):\n    pass\n")

        with pytest.raises(InvalidScriptError):
            DirectoryCatalog(migrations_dir).load("0004_broken")

    def test_load_async_script(self, migrations_dir: Path, write_script):
        """Should load coroutine entry points."""
        write_script(
            migrations_dir,
            "0004_async",
            "async def up(context):\n    pass\n\n\nasync def down(context):\n    pass\n",
        )

        module = DirectoryCatalog(migrations_dir).load("0004_async")

        assert callable(module.up)

    def test_create_first_script(self, tmp_path: Path):
        """Should create the directory and number the first script 0001."""
        migrations = tmp_path / "new_migrations"

        path = DirectoryCatalog(migrations).create("Create users table")

        assert path == migrations / "0001_create_users_table.py"
        content = path.read_text()
        assert "def up(context):" in content
        assert "def down(context):" in content

    def test_create_next_sequence(self, migrations_dir: Path):
        """Should continue numbering after the highest existing script."""
        path = DirectoryCatalog(migrations_dir).create("add index")

        assert path.name == "0004_add_index.py"

    def test_created_script_loads(self, migrations_dir: Path):
        """Should produce a script the catalog can load."""
        catalog = DirectoryCatalog(migrations_dir)
        path = catalog.create("noop")

        module = catalog.load(path.name)

        assert module.up(None) is None

    def test_create_rejects_empty_name(self, tmp_path: Path):
        """Should refuse names with no usable characters."""
        with pytest.raises(ValueError):
            DirectoryCatalog(tmp_path).create("!!!")
