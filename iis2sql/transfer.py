import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

from iis2sql.config import TransferConfig
from iis2sql.inference.iis_detector import IISLogDetector
from iis2sql.inference.utils import CompressionHandler
from iis2sql.parser.w3c_parser import RecordTranspiler
from iis2sql.storage.base_store import StorageError
from iis2sql.storage.sqlite_store import DEFAULT_COLUMNS

logger = logging.getLogger(__name__)


def resolve_log_directory(path):
    path = str(path)
    if path.startswith("."):
        return (Path.cwd() / path).resolve()
    return Path(path)


def discover_log_files(directory, pattern="*.log"):
    directory = resolve_log_directory(directory)

    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ValueError(f"Path is not a directory: {directory}")

    patterns = [pattern] + [pattern + ext for ext in CompressionHandler.COMPRESSION_MAP]
    found = set()
    for glob in patterns:
        found.update(p for p in directory.glob(glob) if p.is_file())
    return sorted(found)


@dataclass
class FileTransferResult:
    path: str
    status: str
    records_inserted: int = 0
    malformed_lines: int = 0
    storage_errors: int = 0
    elapsed_seconds: float = 0.0
    success_rate: float = 0.0
    error_counts: dict = field(default_factory=dict)
    error: str = None

    @property
    def elapsed_minutes(self):
        return self.elapsed_seconds / 60


@dataclass
class TransferSummary:
    files: list = field(default_factory=list)

    @property
    def files_transferred(self):
        return sum(1 for f in self.files if f.status == "transferred")

    @property
    def files_skipped(self):
        return sum(1 for f in self.files if f.status == "skipped")

    @property
    def files_failed(self):
        return sum(1 for f in self.files if f.status == "failed")

    @property
    def records_inserted(self):
        return sum(f.records_inserted for f in self.files)


class LogTransferEngine:
    def __init__(self, store, config=None, sink=None):
        self.store = store
        self.config = config or TransferConfig()
        self.sink = sink or sys.stdout
        self.detector = IISLogDetector(max_lines=self.config.max_scan_lines)
        logger.info(
            f"Initialized transfer engine for table {self.config.table}"
            + (" (dry run)" if self.config.dry_run else "")
        )

    def prepare(self):
        """Create the destination table on first use."""
        if self.config.dry_run:
            return
        if not self.store.table_exists(self.config.table):
            self.store.create_table(self.config.table, DEFAULT_COLUMNS)

    def transfer_directory(self, directory) -> TransferSummary:
        files = discover_log_files(directory, self.config.pattern)
        logger.info(f"{len(files)} file(s) ready for transfer.")

        self.prepare()
        summary = TransferSummary()
        for i, filepath in enumerate(files, 1):
            result = self.transfer_file(filepath)
            summary.files.append(result)

            if result.status == "skipped":
                logger.info(f"[{i}]\t{filepath.name} is not an IIS log file.")
            elif result.status == "failed":
                logger.error(f"[{i}]\t{filepath.name} failed: {result.error}")
            else:
                logger.info(
                    f"[{i}]\t{filepath.name} transferred. "
                    f"{result.records_inserted} record(s), "
                    f"{result.elapsed_minutes:.2f} min"
                )
            if result.malformed_lines:
                logger.warning(
                    f"[{i}]\t{filepath.name}: {result.malformed_lines} malformed line(s) "
                    f"{result.error_counts}, {result.success_rate:.1%} of data lines parsed"
                )

        logger.info(
            f"Transfer finished. {summary.files_transferred} transferred, "
            f"{summary.files_skipped} skipped, {summary.files_failed} failed, "
            f"{summary.records_inserted} record(s) inserted"
        )
        return summary

    def transfer_file(self, filepath) -> FileTransferResult:
        filepath = Path(filepath)
        result = FileTransferResult(path=str(filepath), status="transferred")
        start = time.monotonic()

        try:
            detection = self.detector.detect_file(filepath, encoding=self.config.encoding)
            if not detection.is_recognized:
                result.status = "skipped"
                return result
            self._transfer_records(filepath, result)
        except (OSError, LookupError, ValueError, StorageError) as e:
            # TranspileError is a ValueError; aborted files land here too
            result.status = "failed"
            result.error = str(e)
        finally:
            result.elapsed_seconds = time.monotonic() - start

        return result

    def _transfer_records(self, filepath, result):
        transpiler = RecordTranspiler(
            table=self.config.table, on_malformed=self.config.on_malformed
        )
        field_list_version = 0
        statements = transpiler.transpile_file(filepath, encoding=self.config.encoding)

        try:
            for statement in statements:
                if self.config.dry_run:
                    self.sink.write(statement.to_sql_literal() + "\n")
                    result.records_inserted += 1
                    continue

                if statement.field_list_version != field_list_version:
                    self.store.ensure_columns(self.config.table, statement.columns)
                    field_list_version = statement.field_list_version

                try:
                    self.store.insert(statement)
                except StorageError as e:
                    result.storage_errors += 1
                    if self.config.on_storage_error == "abort":
                        raise
                    logger.warning(f"Skipping record at line {e.line_number}: {e}")
                    continue
                result.records_inserted += 1
        finally:
            statements.close()
            result.malformed_lines = transpiler.stats.malformed_lines
            result.success_rate = transpiler.stats.success_rate
            result.error_counts = transpiler.stats.error_counts()
