from sqlalchemy.exc import OperationalError

def mentions(statement: str, name: str) -> bool:
    if name.startswith("["):
        return name in statement
    return any(quoted in statement for quoted in (f'"{name}"', f"`{name}`", f"[{name}]"))

class FakeResult:
    def __init__(self, conn, rows):
        self.conn = conn
        self.rows = rows
        self.closed = False
        conn.open_results += 1

    def all(self):
        return list(self.rows)

    def close(self):
        if not self.closed:
            self.closed = True
            self.conn.open_results -= 1

class FakeConnection:
    """
    Stands in for a SQLAlchemy Connection.

    `catalog` maps a catalog query to the rows it returns. Rows are names or
    tuples; a DROP statement mentioning the last column of a row removes it.
    """
    def __init__(self, catalog=None, fail_on=(), fail_queries=()):
        self.catalog = {
            query: [row if isinstance(row, tuple) else (row,) for row in rows]
            for query, rows in (catalog or {}).items()
        }
        self.fail_on = set(fail_on)
        self.fail_queries = set(fail_queries)
        self.statements = []
        self.queries = []
        self.parameters = []
        self.open_results = 0
        self.close_count = 0

    def execute(self, statement, parameters=None):
        sql = str(statement)
        if sql in self.catalog or sql in self.fail_queries:
            self.queries.append(sql)
            self.parameters.append(parameters)
            if sql in self.fail_queries:
                raise OperationalError(sql, parameters, Exception("permission denied"))
            return FakeResult(self, self.catalog[sql])

        assert self.open_results == 0, f"{sql} issued while a result set is open"
        self.statements.append(sql)
        if sql in self.fail_on:
            raise OperationalError(sql, parameters, Exception("simulated failure"))
        if sql.startswith("DROP ") or " DROP CONSTRAINT " in sql:
            # ALTER TABLE t DROP CONSTRAINT fk only removes fk
            target = sql.split(" DROP CONSTRAINT ", 1)[-1]
            for rows in self.catalog.values():
                rows[:] = [row for row in rows if not mentions(target, row[-1])]
        return None

    def close(self):
        self.close_count += 1

    @property
    def drops(self):
        return [s for s in self.statements if s.startswith("DROP ")]

class FakeEngine:
    def __init__(self, conn):
        self.conn = conn
        self.connect_count = 0
        self.disposed = False

    def connect(self):
        self.connect_count += 1
        return self.conn

    def dispose(self):
        self.disposed = True

class DownEngine(FakeEngine):
    """An engine whose database cannot be reached."""
    def __init__(self):
        super().__init__(None)

    def connect(self):
        self.connect_count += 1
        raise OperationalError("connect", None, Exception("could not connect to server"))
