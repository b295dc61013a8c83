"""Log format detection, line parsing and pattern/anomaly analysis.

This package provides:
- A catalog of log format descriptors and a sampling format detector
- A line parser producing normalized records
- Pattern tracking, summary statistics and anomaly rules
"""

from .__version__ import __version__
from .anomalies import detect_anomalies
from .detector import FormatDetectionError, FormatDetector
from .engine import LogParser, enable_metrics
from .formats import FORMATS, UnknownFormatError, get_format, list_formats
from .line_source import LineSource, UnsupportedCompressionError
from .models import AnalysisSummary, DetectionResult
from .normalize import normalize_level, normalize_timestamp
from .parser import parse_line
from .patterns import PatternTracker, classify_severity, generalize
from .records import ParsedRecord, ParseProgress, ParseResult, ParseStats, PatternRecord
from .summary import summarize


__all__ = [
    '__version__',
    # Formats and detection
    'FORMATS',
    'get_format',
    'list_formats',
    'FormatDetector',
    'DetectionResult',
    # Parsing
    'LineSource',
    'LogParser',
    'parse_line',
    'normalize_level',
    'normalize_timestamp',
    'enable_metrics',
    # Records
    'ParsedRecord',
    'ParseProgress',
    'ParseResult',
    'ParseStats',
    'PatternRecord',
    # Analysis
    'PatternTracker',
    'generalize',
    'classify_severity',
    'summarize',
    'detect_anomalies',
    'AnalysisSummary',
    # Errors
    'FormatDetectionError',
    'UnknownFormatError',
    'UnsupportedCompressionError',
]
