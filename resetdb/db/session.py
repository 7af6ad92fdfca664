import logging
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from resetdb.core.config import Settings
from resetdb.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

def create_db_engine(settings: Settings) -> Engine:
    # NullPool: the single connection is really closed on release, DDL runs in autocommit
    try:
        return create_engine(settings.DATABASE_URL, poolclass=NullPool, isolation_level="AUTOCOMMIT")
    except (SQLAlchemyError, ImportError) as e:
        # unknown dialect/driver name, or the driver package is not installed
        raise ConfigurationError(f"Could not create a database engine: {e}") from e

@contextmanager
def borrow_connection(engine: Engine) -> Iterator[Connection]:
    """
    Open one connection for the duration of the block and always release it.

    Raises ConfigurationError when no connection can be obtained.
    """
    try:
        conn = engine.connect()
    except SQLAlchemyError as e:
        raise ConfigurationError(f"Could not connect to the database: {e}") from e
    try:
        yield conn
    finally:
        conn.close()
        logger.debug("Connection released")
