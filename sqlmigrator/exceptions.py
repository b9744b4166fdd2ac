"""Exception hierarchy for sqlmigrator.

Definition errors are raised before the database is touched. Execution
errors are raised from inside a migration transaction, after it has been
rolled back.
"""


class MigrationError(Exception):
    """Base class for all migration errors."""


class MigrationDefinitionError(MigrationError):
    """The requested migration cannot be run with the known steps."""


class MigrationExecutionError(MigrationError):
    """A statement, version update or consistency check failed.

    Attributes:
        query: The SQL text that was being executed, if any.
    """

    def __init__(self, message: str, query: str | None = None):
        super().__init__(message)
        self.query = query

    def __str__(self) -> str:
        message = super().__str__()
        if self.query:
            return f"{message} (query: {self.query.strip()})"
        return message


class ForeignKeyCheckError(MigrationExecutionError):
    """The post-migration consistency check returned a violation."""


class LoaderError(MigrationError):
    """A migration directory could not be turned into steps."""


class ConfigError(MigrationError):
    """Source or database path could not be resolved."""
