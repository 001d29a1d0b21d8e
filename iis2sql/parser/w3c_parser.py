import logging
from dataclasses import dataclass
from pathlib import Path

from .base_parser import (
    BaseTranspiler,
    MalformedInputError,
    MalformedRecordError,
    TranspileResult,
)
from iis2sql.inference.utils import CompressionHandler, clean_line

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "RawLog"
FIELDS_DIRECTIVE = "#Fields:"
DIRECTIVE_PREFIX = "#"
NULL_PLACEHOLDER = "-"
DELIMITER = " "


def escape_quotes(value):
    return value.replace("'", "''")


def unescape_quotes(value):
    return value.replace("''", "'")


def quote_identifier(name):
    """Quote a column or table name for use in SQL text."""
    return '"' + name.replace('"', '""') + '"'


def parse_fields_directive(line):
    """Return the field names declared by a #Fields directive line."""
    remainder = line[len(FIELDS_DIRECTIVE):].strip()
    if not remainder:
        return ()
    return tuple(remainder.split(DELIMITER))


@dataclass(frozen=True)
class FieldList:
    names: tuple = ()
    version: int = 0

    def __len__(self):
        return len(self.names)

    def __bool__(self):
        return bool(self.names)

    def replace(self, names):
        return FieldList(names=tuple(names), version=self.version + 1)


@dataclass(frozen=True)
class InsertStatement:
    table: str
    columns: tuple
    values: tuple
    line_number: int = None
    field_list_version: int = 0

    @property
    def parameters(self):
        return self.values

    def to_sql(self, placeholder="?"):
        columns = ", ".join(quote_identifier(c) for c in self.columns)
        placeholders = ", ".join([placeholder] * len(self.columns))
        return (
            f"INSERT INTO {quote_identifier(self.table)} ({columns}) "
            f"VALUES ({placeholders})"
        )

    def to_sql_literal(self):
        """Render the statement with inline values, for display only."""
        columns = ", ".join(quote_identifier(c) for c in self.columns)
        values = ", ".join(
            "NULL" if v is None else f"'{escape_quotes(v)}'" for v in self.values
        )
        return f"INSERT INTO {quote_identifier(self.table)} ({columns}) VALUES ({values})"


class RecordTranspiler(BaseTranspiler):
    """Turns the lines of a W3C extended log into INSERT statements.

    ``#Fields:`` directives set the column list for the lines that follow
    them; other ``#`` lines are ignored. Each data line becomes one
    :class:`InsertStatement` carrying the field list that was active when
    the line was read, with ``-`` tokens mapped to ``None``.

    Generators returned by :meth:`transpile` are single-use. Statistics for
    the most recent run are kept in ``stats``.
    """

    def __init__(self, table=DEFAULT_TABLE, on_malformed="skip"):
        super().__init__(on_malformed=on_malformed)
        if not table:
            raise ValueError("Table name must not be empty")
        self.table = table

    def transpile(self, lines):
        self.stats = TranspileResult()
        field_list = FieldList()

        for line_number, raw_line in enumerate(lines, 1):
            self.stats.total_lines += 1
            line = clean_line(raw_line, line_number)

            if line.startswith(FIELDS_DIRECTIVE):
                field_list = field_list.replace(parse_fields_directive(line))
                self.stats.directive_lines += 1
                self.stats.field_lists_seen += 1
                logger.debug(
                    f"Field list v{field_list.version} on line {line_number}: "
                    f"{len(field_list)} field(s)"
                )
                continue

            if line.startswith(DIRECTIVE_PREFIX):
                self.stats.directive_lines += 1
                continue

            if not line.strip():
                continue

            try:
                statement = self.transpile_line(line, field_list, line_number)
            except (MalformedInputError, MalformedRecordError) as e:
                self._handle_malformed(e)
                continue

            self.stats.records_emitted += 1
            yield statement

        logger.debug(
            f"Transpiled {self.stats.records_emitted} record(s) from "
            f"{self.stats.total_lines} line(s), {self.stats.malformed_lines} malformed"
        )

    def transpile_line(self, line, field_list, line_number=None) -> InsertStatement:
        """Build the statement for a single data line under ``field_list``."""
        if not field_list:
            raise MalformedInputError(
                "data line before any #Fields directive",
                line_number=line_number,
                raw_line=line,
            )

        tokens = escape_quotes(line.rstrip(DELIMITER)).split(DELIMITER)
        if len(tokens) != len(field_list):
            raise MalformedRecordError(
                f"expected {len(field_list)} value(s), found {len(tokens)}",
                line_number=line_number,
                raw_line=line,
            )

        values = tuple(
            None if token == NULL_PLACEHOLDER else unescape_quotes(token)
            for token in tokens
        )
        return InsertStatement(
            table=self.table,
            columns=field_list.names,
            values=values,
            line_number=line_number,
            field_list_version=field_list.version,
        )

    def transpile_file(self, filepath, encoding="utf-8-sig"):
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        reader = CompressionHandler.open_file(filepath, encoding=encoding)
        try:
            yield from self.transpile(reader)
        finally:
            reader.close()
