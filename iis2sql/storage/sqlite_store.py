"""
SQLite destination for transferred log records.

Every W3C field is stored as TEXT, exactly as it appears in the log, so no
value is lost to type conversion. Each INSERT is committed on its own.
"""

import logging
import sqlite3

from .base_store import BaseLogStore, StorageError
from iis2sql.parser.w3c_parser import quote_identifier

logger = logging.getLogger(__name__)

# Fields IIS can write in W3C format, in the order of the IIS Manager dialog.
DEFAULT_COLUMNS = (
    "date",
    "time",
    "s-sitename",
    "s-computername",
    "s-ip",
    "cs-method",
    "cs-uri-stem",
    "cs-uri-query",
    "s-port",
    "cs-username",
    "c-ip",
    "cs-version",
    "cs(User-Agent)",
    "cs(Cookie)",
    "cs(Referer)",
    "cs-host",
    "sc-status",
    "sc-substatus",
    "sc-win32-status",
    "sc-bytes",
    "cs-bytes",
    "time-taken",
)


class SQLiteLogStore(BaseLogStore):
    def __init__(self, db_path, timeout=30):
        self.db_path = str(db_path)
        try:
            self.conn = sqlite3.connect(self.db_path, timeout=timeout)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database {self.db_path}: {e}") from e
        logger.info(f"Opened SQLite database {self.db_path}")

    def table_exists(self, table):
        row = self.conn.execute(
            "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table,),
        ).fetchone()
        return bool(row[0])

    def get_columns(self, table):
        rows = self.conn.execute(f"PRAGMA table_info({quote_identifier(table)})")
        return [row[1] for row in rows.fetchall()]

    def create_table(self, table, columns=DEFAULT_COLUMNS):
        column_defs = ",\n    ".join(f"{quote_identifier(c)} TEXT" for c in columns)
        try:
            with self.conn:
                self.conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} (\n"
                    f"    id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
                    f"    {column_defs}\n"
                    f")"
                )
        except sqlite3.Error as e:
            raise StorageError(f"Cannot create table {table}: {e}") from e
        logger.info(f"Created table {table} with {len(columns)} log column(s)")

    def ensure_columns(self, table, columns):
        existing = {c.lower() for c in self.get_columns(table)}
        added = []
        try:
            with self.conn:
                for column in columns:
                    if column.lower() in existing:
                        continue
                    self.conn.execute(
                        f"ALTER TABLE {quote_identifier(table)} "
                        f"ADD COLUMN {quote_identifier(column)} TEXT"
                    )
                    existing.add(column.lower())
                    added.append(column)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot add columns to {table}: {e}") from e

        if added:
            logger.info(f"Added column(s) to {table}: {', '.join(added)}")
        return added

    def insert(self, statement):
        try:
            with self.conn:
                self.conn.execute(statement.to_sql(), statement.parameters)
        except sqlite3.Error as e:
            raise StorageError(f"Insert failed: {e}", statement=statement) from e

    def count_rows(self, table):
        row = self.conn.execute(f"SELECT COUNT(*) FROM {quote_identifier(table)}")
        return row.fetchone()[0]

    def close(self):
        self.conn.close()
