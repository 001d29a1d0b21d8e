from abc import ABC, abstractmethod

from .log_core import FormatDetectionResult, LogFormat
from .utils import clean_line


class BaseFormatDetector(ABC):

    def __init__(self, max_lines=None):
        self.name = self.__class__.__name__
        self.max_lines = max_lines

    @abstractmethod
    def detect(self, lines) -> FormatDetectionResult:
        """Scan header lines and report whether the format is recognized."""
        pass

    def get_scan_limit(self):
        """Return the maximum number of lines scanned, or None for no limit."""
        return self.max_lines

    def iter_scan_lines(self, lines):
        """Yield (line_number, line) pairs up to the scan limit."""
        limit = self.get_scan_limit()
        for i, line in enumerate(lines, 1):
            if limit is not None and i > limit:
                break
            yield i, clean_line(line, i)

    def _create_unknown_result(self, lines_scanned=0, **metadata):
        return FormatDetectionResult(
            format_type=LogFormat.UNKNOWN,
            confidence=0.0,
            lines_scanned=lines_scanned,
            metadata=metadata,
        )
