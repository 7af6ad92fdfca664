from enum import StrEnum
from resetdb.core.exceptions import UnsupportedDialectError

class Dialect(StrEnum):
    ORACLE = "oracle"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"

    @classmethod
    def parse(cls, value: "Dialect | str | None") -> "Dialect":
        """
        Resolve a dialect tag or a SQLAlchemy backend name to a Dialect.
        """
        if isinstance(value, cls):
            return value
        tag = (value or "").strip().lower()
        tag = BACKEND_ALIASES.get(tag, tag)
        try:
            return cls(tag)
        except ValueError:
            raise UnsupportedDialectError(value) from None

# SQLAlchemy backend names that differ from our tags
BACKEND_ALIASES = {
    "mssql": "sqlserver",
    "mariadb": "mysql",
    "postgres": "postgresql",
}
