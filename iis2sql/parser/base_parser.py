import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

MALFORMED_POLICIES = ("skip", "abort")


class TranspileError(ValueError):
    """A log line that cannot be turned into a record."""

    def __init__(self, message, line_number=None, raw_line=None):
        super().__init__(message)
        self.line_number = line_number
        self.raw_line = raw_line

    def __str__(self):
        message = super().__str__()
        if self.line_number is not None:
            return f"line {self.line_number}: {message}"
        return message


class MalformedInputError(TranspileError):
    """A data line appeared before any #Fields directive."""


class MalformedRecordError(TranspileError):
    """A data line whose value count does not match the active field list."""


@dataclass
class TranspileResult:
    total_lines: int = 0
    directive_lines: int = 0
    records_emitted: int = 0
    malformed_lines: int = 0
    field_lists_seen: int = 0
    errors: list = field(default_factory=list)

    @property
    def data_lines(self):
        return self.records_emitted + self.malformed_lines

    @property
    def success_rate(self):
        return self.records_emitted / self.data_lines if self.data_lines > 0 else 0.0

    def add_error(self, error):
        self.errors.append(error)
        self.malformed_lines += 1

    def error_counts(self):
        counts = {}
        for error in self.errors:
            error_type = type(error).__name__
            counts[error_type] = counts.get(error_type, 0) + 1
        return counts


class BaseTranspiler(ABC):
    def __init__(self, on_malformed="skip"):
        if on_malformed not in MALFORMED_POLICIES:
            raise ValueError(
                f"on_malformed must be one of {MALFORMED_POLICIES}, got {on_malformed!r}"
            )
        self.on_malformed = on_malformed
        self.stats = TranspileResult()

    @abstractmethod
    def transpile(self, lines):
        pass

    def _handle_malformed(self, error):
        """Record a malformed line; raise it when the policy is to abort."""
        self.stats.add_error(error)
        if self.on_malformed == "abort":
            raise error
        logger.warning(f"Skipping malformed record at {error}")
