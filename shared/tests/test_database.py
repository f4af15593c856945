"""
Unit Tests for Database Operations

A fake connection stands in for redshift_connector so transaction handling
can be checked without a warehouse.

Run with: pytest shared/tests/ -v
"""

import polars as pl
import pytest

from shared import database


class FakeCursor:

    def __init__(self, conn):
        self.conn = conn
        self.description = [("id",), ("city",)]

    def execute(self, query):
        if self.conn.fail_on and self.conn.fail_on in query:
            raise Exception("syntax error")
        self.conn.statements.append(query)

    def fetchall(self):
        return self.conn.rows

    def close(self):
        pass


class FakeConnection:

    def __init__(self, rows=None, fail_on=None):
        self.rows = rows or []
        self.fail_on = fail_on
        self.statements = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


@pytest.fixture
def conn(monkeypatch):
    fake = FakeConnection(rows=[("ORD-1", "Cairo"), ("ORD-2", "Giza")])
    monkeypatch.setattr(database, "get_connection", lambda: fake)
    return fake


class TestPullData:

    def test_returns_polars_frame(self, conn):
        df = database.pull_data("SELECT id, city FROM crm.orders")
        assert isinstance(df, pl.DataFrame)
        assert df.columns == ["id", "city"]
        assert df["id"].to_list() == ["ORD-1", "ORD-2"]

    def test_read_transaction_ended(self, conn):
        database.pull_data("SELECT id, city FROM crm.orders")
        database.pull_data("SELECT id, city FROM crm.orders")
        assert conn.commits == 2
        assert conn.rollbacks == 0

    def test_failure_rolls_back(self, conn):
        conn.fail_on = "SELECT"
        with pytest.raises(RuntimeError):
            database.pull_data("SELECT id FROM crm.orders")
        assert conn.rollbacks == 1
        assert conn.commits == 0


class TestExecuteQuery:

    def test_commit(self, conn):
        database.execute_query("DELETE FROM crm.orders WHERE id = 'ORD-1'")
        assert conn.commits == 1

    def test_left_open(self, conn):
        database.execute_query("DELETE FROM crm.orders WHERE id = 'ORD-1'", commit=False)
        assert conn.commits == 0

    def test_failure_rolls_back(self, conn):
        conn.fail_on = "DELETE"
        with pytest.raises(RuntimeError):
            database.execute_query("DELETE FROM crm.orders")
        assert conn.rollbacks == 1


class TestPushData:

    def test_batched_inserts_single_commit(self, conn):
        df = pl.DataFrame({"id": ["A", "B", "C"], "paid": [1.0, None, 3.5]})
        database.push_data(df, "crm.orders", batch_size=2, verbose=False)

        assert conn.statements == [
            "INSERT INTO crm.orders (id, paid) VALUES ('A', 1.0), ('B', NULL)",
            "INSERT INTO crm.orders (id, paid) VALUES ('C', 3.5)",
        ]
        assert conn.commits == 1

    def test_failure_rolls_back(self, conn):
        conn.fail_on = "INSERT"
        with pytest.raises(RuntimeError):
            database.push_data(pl.DataFrame({"id": ["A"]}), "crm.orders", verbose=False)
        assert conn.rollbacks == 1
        assert conn.commits == 0

    def test_empty_frame_is_noop(self, conn):
        database.push_data(pl.DataFrame({"id": []}, schema={"id": pl.Utf8}), "crm.orders", verbose=False)
        assert conn.statements == []

    def test_table_needs_schema(self, conn):
        with pytest.raises(ValueError):
            database.push_data(pl.DataFrame({"id": ["A"]}), "orders")


class TestFormatValue:

    @pytest.mark.parametrize("value,expected", [
        (None, "NULL"),
        (float("nan"), "NULL"),
        (True, "TRUE"),
        ("O'Brien", "'O''Brien'"),
        (12.5, "12.5"),
    ])
    def test_literals(self, value, expected):
        assert database.format_value(value) == expected
