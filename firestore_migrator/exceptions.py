"""Custom exception hierarchy for the Firestore to Supabase migration tool."""


class MigratorError(Exception):
    """Base exception for all migration-related errors."""


class ConfigError(MigratorError):
    """Raised when configuration or credentials are invalid or missing."""


class SourceReadError(MigratorError):
    """Raised when a source collection cannot be read at all."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to read collection {path}: {reason}")
        self.path = path
        self.reason = reason


class DestinationError(MigratorError):
    """Raised when a destination call fails in an unrecoverable way."""


class MigrationCancelledError(MigratorError):
    """Raised when a cancellation request is observed between records."""
