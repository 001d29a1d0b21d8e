import logging
from pathlib import Path

from .base_detector import BaseFormatDetector
from .log_core import FormatDetectionResult, LogFormat
from .utils import CompressionHandler

logger = logging.getLogger(__name__)

SOFTWARE_DIRECTIVE = "#Software: "
IIS_SIGNATURE = "#Software: Microsoft Internet Information Services"


def split_software_version(software):
    """Split 'Microsoft Internet Information Services 7.5' into name and version."""
    name, _, last = software.rpartition(" ")
    if name and last[:1].isdigit():
        return name, last
    return software, None


class IISLogDetector(BaseFormatDetector):
    """Recognizes logs written by Microsoft IIS.

    Lines are read one at a time from the start of the input until one
    begins with the IIS #Software signature. Scanning stops at the first
    match, so only the consumed prefix of the input is read. With
    ``max_lines`` set, scanning also gives up after that many lines.
    """

    def detect(self, lines) -> FormatDetectionResult:
        lines_scanned = 0

        for line_number, line in self.iter_scan_lines(lines):
            lines_scanned = line_number
            if line.startswith(IIS_SIGNATURE):
                software = line[len(SOFTWARE_DIRECTIVE):].strip()
                _, version = split_software_version(software)
                logger.debug(f"IIS signature found on line {line_number}: {software}")
                return FormatDetectionResult(
                    format_type=LogFormat.IIS_W3C,
                    confidence=1.0,
                    software=software,
                    version=version,
                    lines_scanned=lines_scanned,
                    metadata={"signature_line": line_number},
                )

        limit = self.get_scan_limit()
        if limit is not None and lines_scanned >= limit:
            logger.debug(f"{self.name} gave up after {limit} lines")
            return self._create_unknown_result(
                lines_scanned, scan_limit_reached=True
            )

        if lines_scanned == 0:
            return self._create_unknown_result(0, error="Empty input")

        return self._create_unknown_result(
            lines_scanned, message="No IIS #Software directive found"
        )

    def detect_file(self, filepath, encoding="utf-8-sig") -> FormatDetectionResult:
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        if not filepath.is_file():
            raise ValueError(f"Path is not a file: {filepath}")

        reader = CompressionHandler.open_file(filepath, encoding=encoding)
        try:
            result = self.detect(reader)
        finally:
            reader.close()

        result.add_metadata(file_path=str(filepath))
        logger.debug(
            f"{filepath}: {result.format_type.value} "
            f"after {result.lines_scanned} line(s)"
        )
        return result
