class ResetError(Exception):
    """
    A reset step failed and the remaining phases were aborted.

    Carries the SQL statement that failed and the underlying database error.
    """
    def __init__(self, statement: str, cause: BaseException):
        self.statement = statement
        self.cause = cause
        super().__init__(f"{statement!r} failed: {cause}")

class CatalogQueryError(ResetError):
    """Enumerating objects from the system catalog failed."""

class DropStatementError(ResetError):
    """A DDL statement against an enumerated object failed."""

class UnsupportedDialectError(ValueError):
    def __init__(self, dialect):
        self.dialect = dialect
        super().__init__(f"Unsupported DBMS: {dialect}")

class ConfigurationError(Exception):
    pass
