"""
IIS Log to SQL transfer

Loads Microsoft IIS access logs (W3C Extended Log File Format) into a
relational table, creating the destination schema on first use.

This package provides:
- Detection of IIS logs from their #Software header directive
- A transpiler turning data lines into parameterized INSERT statements
- Support for compressed files (.gz, .bz2, .xz, .lzma)
- A SQLite storage backend and a batch driver for whole directories

Basic usage:
    from iis2sql.inference.iis_detector import IISLogDetector
    from iis2sql.parser.w3c_parser import RecordTranspiler

    detector = IISLogDetector()
    if detector.detect_file("u_ex230101.log").is_recognized:
        transpiler = RecordTranspiler(table="RawLog")
        for statement in transpiler.transpile_file("u_ex230101.log"):
            print(statement.to_sql(), statement.parameters)
"""

__version__ = "0.1.0"
