import gzip
import bz2
import lzma
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class CompressionHandler:

    COMPRESSION_MAP = {".gz": "gzip", ".bz2": "bz2", ".xz": "xz", ".lzma": "lzma"}

    @classmethod
    def detect_compression(cls, filepath):
        suffix = Path(filepath).suffix.lower()
        return cls.COMPRESSION_MAP.get(suffix)

    @classmethod
    def open_file(cls, filepath, encoding="utf-8-sig"):
        """Yield the text lines of a plain or compressed log file.

        The file stays open only while the generator is being consumed and
        is closed when it is exhausted or discarded.
        """
        filepath = Path(filepath)
        compression = cls.detect_compression(filepath)

        try:
            if compression == "gzip":
                with gzip.open(filepath, "rt", encoding=encoding, errors="replace") as f:
                    yield from f
            elif compression == "bz2":
                with bz2.open(filepath, "rt", encoding=encoding, errors="replace") as f:
                    yield from f
            elif compression in ("xz", "lzma"):
                with lzma.open(filepath, "rt", encoding=encoding, errors="replace") as f:
                    yield from f
            else:
                with open(filepath, "r", encoding=encoding, errors="replace") as f:
                    yield from f
        except OSError as e:
            logger.error(f"Error opening file {filepath}: {e}")
            raise


BYTE_ORDER_MARK = "\ufeff"


def clean_line(line, line_number):
    """Drop the line terminator, and a byte-order mark left on the first line."""
    line = line.rstrip("\r\n")
    if line_number == 1:
        line = line.lstrip(BYTE_ORDER_MARK)
    return line
