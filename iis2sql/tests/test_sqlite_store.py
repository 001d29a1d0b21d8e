import sqlite3

import pytest

from iis2sql.parser.w3c_parser import InsertStatement
from iis2sql.storage.base_store import StorageError
from iis2sql.storage.sqlite_store import DEFAULT_COLUMNS, SQLiteLogStore


@pytest.fixture
def store(tmp_path):
    with SQLiteLogStore(tmp_path / "logs.db") as store:
        yield store


def test_create_table(store):
    assert not store.table_exists("RawLog")

    store.create_table("RawLog")

    assert store.table_exists("RawLog")
    assert store.get_columns("RawLog") == ["id"] + list(DEFAULT_COLUMNS)


def test_create_table_is_idempotent(store):
    store.create_table("RawLog", ("date",))
    store.create_table("RawLog", ("date",))

    assert store.get_columns("RawLog") == ["id", "date"]


def test_insert_with_nulls_and_quotes(store):
    store.create_table("RawLog")
    statement = InsertStatement(
        table="RawLog",
        columns=("date", "cs-uri-stem", "c-ip"),
        values=("2023-01-01", "/o'brien.html", None),
        line_number=3,
    )

    store.insert(statement)

    row = store.conn.execute(
        'SELECT "date", "cs-uri-stem", "c-ip" FROM "RawLog"'
    ).fetchone()
    assert row == ("2023-01-01", "/o'brien.html", None)
    assert store.count_rows("RawLog") == 1


def test_insert_is_committed(tmp_path):
    db_path = tmp_path / "logs.db"
    with SQLiteLogStore(db_path) as store:
        store.create_table("RawLog")
        store.insert(
            InsertStatement(table="RawLog", columns=("date",), values=("2023-01-01",))
        )

    conn = sqlite3.connect(db_path)
    try:
        assert conn.execute('SELECT COUNT(*) FROM "RawLog"').fetchone()[0] == 1
    finally:
        conn.close()


def test_ensure_columns_adds_missing(store):
    store.create_table("RawLog", ("date", "time"))

    added = store.ensure_columns("RawLog", ("date", "TIME", "x-custom"))

    assert added == ["x-custom"]
    assert store.get_columns("RawLog") == ["id", "date", "time", "x-custom"]
    assert store.ensure_columns("RawLog", ("x-custom",)) == []


def test_insert_unknown_column_raises_storage_error(store):
    store.create_table("RawLog", ("date",))
    statement = InsertStatement(
        table="RawLog", columns=("nope",), values=("1",), line_number=7
    )

    with pytest.raises(StorageError) as excinfo:
        store.insert(statement)

    assert excinfo.value.statement is statement
    assert excinfo.value.line_number == 7


def test_hostile_table_name_is_quoted(store):
    table = 'Raw"; DROP TABLE x; --'
    store.create_table(table, ("date",))

    assert store.table_exists(table)
    store.insert(InsertStatement(table=table, columns=("date",), values=("d",)))
    assert store.count_rows(table) == 1
