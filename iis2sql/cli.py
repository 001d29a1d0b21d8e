#!/usr/bin/env python3

"""
cli.py

Command line entry point for the IIS log to SQL transfer.

Usage: iis2sql [logs_folder_path]
"""

import argparse
import logging
import sys

from .config import STORAGE_ERROR_POLICIES, TransferConfig
from .parser.base_parser import MALFORMED_POLICIES
from .storage.base_store import StorageError
from .storage.sqlite_store import SQLiteLogStore
from .transfer import LogTransferEngine

logger = logging.getLogger(__name__)

DESCRIPTION = """\
IIS Log to SQL.
Transfers every IIS log file in a folder into a database table.
The required database table will be created.
For the current folder, use '.'."""


def build_parser():
    parser = argparse.ArgumentParser(
        prog="iis2sql",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", help="Folder containing the IIS log files")
    parser.add_argument(
        "--db",
        dest="database",
        help="Path to the SQLite database file (env: IIS2SQL_DATABASE, default: iis2sql.db)",
    )
    parser.add_argument(
        "--table", help="Destination table (env: IIS2SQL_TABLE, default: RawLog)"
    )
    parser.add_argument(
        "--pattern", help="File name pattern to transfer (default: *.log)"
    )
    parser.add_argument(
        "--encoding", help="Log file encoding (env: IIS2SQL_ENCODING, default: utf-8-sig)"
    )
    parser.add_argument(
        "--on-malformed",
        choices=MALFORMED_POLICIES,
        help="Skip malformed lines or abort the file (default: skip)",
    )
    parser.add_argument(
        "--on-storage-error",
        choices=STORAGE_ERROR_POLICIES,
        help="Skip records the database rejects or abort the file (default: abort)",
    )
    parser.add_argument(
        "--max-scan-lines",
        type=int,
        help="Stop looking for the IIS #Software directive after this many lines",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Print the INSERT statements instead of executing them",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None):
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        parser.print_help()
        return 2

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = TransferConfig.from_env(
            database=args.database,
            table=args.table,
            pattern=args.pattern,
            encoding=args.encoding,
            on_malformed=args.on_malformed,
            on_storage_error=args.on_storage_error,
            max_scan_lines=args.max_scan_lines,
            dry_run=args.dry_run,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        if config.dry_run:
            summary = LogTransferEngine(None, config).transfer_directory(args.path)
        else:
            with SQLiteLogStore(config.database) as store:
                engine = LogTransferEngine(store, config)
                summary = engine.transfer_directory(args.path)
    except (FileNotFoundError, ValueError, StorageError) as e:
        logger.error(str(e))
        return 1

    return 1 if summary.files_failed else 0


if __name__ == "__main__":
    sys.exit(main())
