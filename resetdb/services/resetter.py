"""
Per-dialect removal of every user-created view, table, index and sequence.

Each dialect runs a fixed list of phases. A phase enumerates object names from
the system catalog, closes the result, then issues one DDL statement per name.
"""
import logging
from contextlib import closing
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from resetdb.core.exceptions import CatalogQueryError, ConfigurationError, DropStatementError
from resetdb.models.enums import Dialect
from resetdb.schemas.report import FailedStatement, ResetReport

logger = logging.getLogger(__name__)

# PostgreSQL
PG_TABLES_QUERY = (
    "SELECT c.relname FROM pg_catalog.pg_class c "
    "LEFT JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace "
    "WHERE c.relkind = 'r' AND n.nspname NOT IN ('pg_catalog', 'pg_toast') "
    "AND pg_catalog.pg_table_is_visible(c.oid)"
)

# MySQL
MYSQL_VIEWS_QUERY = "SELECT table_name FROM information_schema.views WHERE table_schema = DATABASE()"
MYSQL_TABLES_QUERY = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = DATABASE() AND table_type = 'BASE TABLE'"
)
MYSQL_DISABLE_FK_CHECKS = "SET FOREIGN_KEY_CHECKS = 0"
MYSQL_ENABLE_FK_CHECKS = "SET FOREIGN_KEY_CHECKS = 1"

# Oracle, recycle bin leftovers (BIN$...) are skipped
ORACLE_VIEWS_QUERY = "SELECT object_name FROM user_objects WHERE object_type = 'VIEW'"
ORACLE_INDEXES_QUERY = (
    "SELECT object_name FROM user_objects WHERE object_type = 'INDEX' "
    "AND object_name NOT LIKE 'SYS\\_%' ESCAPE '\\' AND object_name NOT LIKE 'BIN$%'"
)
ORACLE_TABLES_QUERY = "SELECT table_name FROM all_tables WHERE owner = :owner AND dropped = 'NO'"
ORACLE_SEQUENCES_QUERY = "SELECT sequence_name FROM user_sequences"

# SQL Server, names come back already quoted and schema-qualified
MSSQL_VIEWS_QUERY = (
    "SELECT QUOTENAME(SCHEMA_NAME(o.schema_id)) + N'.' + QUOTENAME(o.name) FROM sys.objects o "
    "WHERE OBJECTPROPERTY(o.object_id, N'IsView') = 1 AND o.is_ms_shipped = 0"
)
MSSQL_TABLES_QUERY = (
    "SELECT QUOTENAME(SCHEMA_NAME(t.schema_id)) + N'.' + QUOTENAME(t.name) FROM sys.tables t "
    "WHERE t.is_ms_shipped = 0"
)
MSSQL_FOREIGN_KEYS_QUERY = (
    "SELECT QUOTENAME(OBJECT_SCHEMA_NAME(fk.parent_object_id)) + N'.' + QUOTENAME(OBJECT_NAME(fk.parent_object_id)), "
    "QUOTENAME(fk.name) FROM sys.foreign_keys fk"
)

def quote_double(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'

def quote_backtick(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"

def _enumerate(conn: Connection, query: str, params: Optional[Dict[str, Any]] = None) -> List[tuple]:
    """
    Run a catalog query and return every row.

    The result is closed before returning, so the caller is free to issue
    further statements on the same connection.
    """
    try:
        with closing(conn.execute(text(query), params)) as result:
            return [tuple(row) for row in result.all()]
    except SQLAlchemyError as e:
        raise CatalogQueryError(query, e) from e

def _enumerate_names(conn: Connection, query: str, params: Optional[Dict[str, Any]] = None) -> List[str]:
    return [row[0] for row in _enumerate(conn, query, params)]

def _execute(conn: Connection, statement: str, report: ResetReport) -> None:
    logger.debug(f"Executing: {statement}")
    try:
        conn.execute(text(statement))
    except SQLAlchemyError as e:
        raise DropStatementError(statement, e) from e
    report.succeeded.append(statement)

def _execute_all(conn: Connection, statements: List[str], report: ResetReport) -> None:
    for statement in statements:
        _execute(conn, statement, report)

def reset_postgresql(conn: Connection, report: ResetReport, schema_owner: Optional[str] = None) -> None:
    tables = _enumerate_names(conn, PG_TABLES_QUERY)
    logger.info(f"Dropping {len(tables)} tables")
    # CASCADE takes dependent views and constraints along
    _execute_all(conn, [f"DROP TABLE {quote_double(name)} CASCADE" for name in tables], report)

def reset_mysql(conn: Connection, report: ResetReport, schema_owner: Optional[str] = None) -> None:
    views = _enumerate_names(conn, MYSQL_VIEWS_QUERY)
    logger.info(f"Dropping {len(views)} views")
    _execute_all(conn, [f"DROP VIEW IF EXISTS {quote_backtick(name)}" for name in views], report)

    # session-scoped flag, never leave it off
    _execute(conn, MYSQL_DISABLE_FK_CHECKS, report)
    try:
        tables = _enumerate_names(conn, MYSQL_TABLES_QUERY)
        logger.info(f"Dropping {len(tables)} tables")
        _execute_all(conn, [f"DROP TABLE IF EXISTS {quote_backtick(name)}" for name in tables], report)
    except Exception:
        # the table-phase error is the one raised
        try:
            _execute(conn, MYSQL_ENABLE_FK_CHECKS, report)
        except DropStatementError as e:
            logger.error(f"Could not perform: {e.statement} ({e.cause})")
        raise
    _execute(conn, MYSQL_ENABLE_FK_CHECKS, report)

def reset_oracle(conn: Connection, report: ResetReport, schema_owner: Optional[str] = None) -> None:
    if not schema_owner:
        raise ConfigurationError("Oracle reset requires the schema owner")
    owner = schema_owner.upper()

    views = _enumerate_names(conn, ORACLE_VIEWS_QUERY)
    logger.info(f"Dropping {len(views)} views")
    _execute_all(conn, [f"DROP VIEW {quote_double(name)}" for name in views], report)

    # Indexes backing constraints vanish or refuse to drop; keep going either way
    indexes = _enumerate_names(conn, ORACLE_INDEXES_QUERY)
    logger.info(f"Dropping {len(indexes)} indexes")
    for name in indexes:
        statement = f"DROP INDEX {quote_double(name)}"
        try:
            _execute(conn, statement, report)
        except DropStatementError as e:
            logger.error(f"Could not perform: {statement} ({e.cause})")
            report.failed.append(FailedStatement(statement=statement, error=str(e.cause)))

    tables = _enumerate_names(conn, ORACLE_TABLES_QUERY, {"owner": owner})
    logger.info(f"Dropping {len(tables)} tables owned by {owner}")
    _execute_all(
        conn,
        [f"DROP TABLE {quote_double(owner)}.{quote_double(name)} CASCADE CONSTRAINTS PURGE" for name in tables],
        report,
    )

    sequences = _enumerate_names(conn, ORACLE_SEQUENCES_QUERY)
    logger.info(f"Dropping {len(sequences)} sequences")
    _execute_all(conn, [f"DROP SEQUENCE {quote_double(name)}" for name in sequences], report)

def reset_sqlserver(conn: Connection, report: ResetReport, schema_owner: Optional[str] = None) -> None:
    views = _enumerate_names(conn, MSSQL_VIEWS_QUERY)
    logger.info(f"Dropping {len(views)} views")
    _execute_all(conn, [f"DROP VIEW {name}" for name in views], report)

    tables = _enumerate_names(conn, MSSQL_TABLES_QUERY)
    logger.info(f"Disabling constraints on {len(tables)} tables")
    _execute_all(conn, [f"ALTER TABLE {name} NOCHECK CONSTRAINT all" for name in tables], report)

    # A disabled foreign key still blocks DROP TABLE on the referenced table
    foreign_keys = _enumerate(conn, MSSQL_FOREIGN_KEYS_QUERY)
    logger.info(f"Dropping {len(foreign_keys)} foreign keys")
    _execute_all(conn, [f"ALTER TABLE {table} DROP CONSTRAINT {fk}" for table, fk in foreign_keys], report)

    logger.info(f"Dropping {len(tables)} tables")
    _execute_all(conn, [f"DROP TABLE {name}" for name in tables], report)

DIALECT_RESETTERS: Dict[Dialect, Callable[[Connection, ResetReport, Optional[str]], None]] = {
    Dialect.ORACLE: reset_oracle,
    Dialect.POSTGRESQL: reset_postgresql,
    Dialect.MYSQL: reset_mysql,
    Dialect.SQLSERVER: reset_sqlserver,
}

def reset(dialect: Dialect | str, conn: Connection, schema_owner: Optional[str] = None) -> ResetReport:
    """
    Drop every user-created view, table, index and sequence reachable through `conn`.

    The connection is borrowed, never closed here. Statements that already ran
    stay applied when a later one fails.

    Raises:
        UnsupportedDialectError: `dialect` is not one of the known dialects.
        ConfigurationError: Oracle was selected without a schema owner.
        CatalogQueryError, DropStatementError: a fatal statement failed.
    """
    dialect = Dialect.parse(dialect)
    report = ResetReport(dialect=dialect)
    logger.info(f"Resetting {dialect} database")
    DIALECT_RESETTERS[dialect](conn, report, schema_owner)
    if report.failed:
        logger.warning(f"{len(report.failed)} statements failed and were skipped")
    logger.info(f"Reset successfully done ({len(report.succeeded)} statements executed)")
    return report
