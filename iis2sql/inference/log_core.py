from enum import Enum
from dataclasses import dataclass, field


class LogFormat(Enum):
    IIS_W3C = "iis_w3c"
    UNKNOWN = "unknown"


@dataclass
class FormatDetectionResult:

    format_type: LogFormat
    confidence: float
    software: str = None
    version: str = None
    lines_scanned: int = 0
    metadata: dict = field(default_factory=dict)

    @property
    def is_recognized(self):
        return self.format_type != LogFormat.UNKNOWN

    def add_metadata(self, **values):
        self.metadata.update(values)
