import os
from dataclasses import dataclass, fields

from iis2sql.parser.base_parser import MALFORMED_POLICIES
from iis2sql.parser.w3c_parser import DEFAULT_TABLE

STORAGE_ERROR_POLICIES = ("skip", "abort")

ENV_VARS = {
    "database": "IIS2SQL_DATABASE",
    "table": "IIS2SQL_TABLE",
    "encoding": "IIS2SQL_ENCODING",
}


@dataclass
class TransferConfig:
    database: str = "iis2sql.db"
    table: str = DEFAULT_TABLE
    pattern: str = "*.log"
    encoding: str = "utf-8-sig"
    on_malformed: str = "skip"
    on_storage_error: str = "abort"
    max_scan_lines: int = None
    dry_run: bool = False

    def __post_init__(self):
        if not self.table:
            raise ValueError("Table name must not be empty")
        if self.on_malformed not in MALFORMED_POLICIES:
            raise ValueError(
                f"on_malformed must be one of {MALFORMED_POLICIES}, got {self.on_malformed!r}"
            )
        if self.on_storage_error not in STORAGE_ERROR_POLICIES:
            raise ValueError(
                f"on_storage_error must be one of {STORAGE_ERROR_POLICIES}, "
                f"got {self.on_storage_error!r}"
            )
        if self.max_scan_lines is not None and self.max_scan_lines < 1:
            raise ValueError("max_scan_lines must be a positive number")

    @classmethod
    def from_env(cls, environ=None, **overrides):
        """Build a config from IIS2SQL_* variables; non-None overrides win."""
        environ = os.environ if environ is None else environ
        values = {}
        for name, var in ENV_VARS.items():
            if environ.get(var):
                values[name] = environ[var]

        known = {f.name for f in fields(cls)}
        for name, value in overrides.items():
            if name not in known:
                raise TypeError(f"Unknown config option: {name}")
            if value is not None:
                values[name] = value
        return cls(**values)
