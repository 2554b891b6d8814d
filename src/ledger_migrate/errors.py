"""ledger-migrate error types.

All custom exceptions inherit from LedgerMigrateError so callers can
catch anything raised by the package in one place. Exceptions raised by
migration scripts themselves are propagated unchanged.
"""


class LedgerMigrateError(Exception):
    """Base exception for all ledger-migrate errors."""

    pass


class ConfigurationError(LedgerMigrateError):
    """Invalid configuration."""

    pass


class LedgerError(LedgerMigrateError):
    """Ledger storage could not be read or written."""

    pass


class MigrationAlreadyRunningError(LedgerMigrateError):
    """A run was requested while another run is still in progress."""

    def __init__(self, message: str = "Unable to start migrations: already running") -> None:
        super().__init__(message)


class ScriptNotFoundError(LedgerMigrateError):
    """No migration script is registered under the requested identifier."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Migration script not found: {identifier}")
        self.identifier = identifier


class InvalidScriptError(LedgerMigrateError):
    """A migration script does not expose callable up/down entry points."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Invalid migration script {identifier}: {reason}")
        self.identifier = identifier
