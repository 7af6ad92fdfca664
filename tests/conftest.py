import pytest
from resetdb.services import resetter
from tests.utils import FakeConnection

# Every catalog query each dialect issues, so a test only lists the objects it cares about
CATALOG_QUERIES = {
    "postgresql": [resetter.PG_TABLES_QUERY],
    "mysql": [resetter.MYSQL_VIEWS_QUERY, resetter.MYSQL_TABLES_QUERY],
    "oracle": [
        resetter.ORACLE_VIEWS_QUERY,
        resetter.ORACLE_INDEXES_QUERY,
        resetter.ORACLE_TABLES_QUERY,
        resetter.ORACLE_SEQUENCES_QUERY,
    ],
    "sqlserver": [
        resetter.MSSQL_VIEWS_QUERY,
        resetter.MSSQL_TABLES_QUERY,
        resetter.MSSQL_FOREIGN_KEYS_QUERY,
    ],
}

@pytest.fixture
def make_connection():
    def _make(dialect, objects=None, **kwargs):
        catalog = {query: [] for query in CATALOG_QUERIES[dialect]}
        catalog.update(objects or {})
        return FakeConnection(catalog, **kwargs)
    return _make

@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # Keep a developer's .env and exported variables out of the tests
    monkeypatch.chdir(tmp_path)
    for name in ("DATABASE_URL", "DB_DIALECT", "DB_SCHEMA_OWNER", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
