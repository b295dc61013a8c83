"""Data models produced by a parse run.

These are plain dataclasses rather than pydantic models: one ParsedRecord is
created per input line, and files may hold millions of lines.
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Any


# Storage column order used by the persistence layer for parsed records
STORAGE_COLUMNS = (
    'line_number',
    'raw_line',
    'timestamp',
    'level',
    'message',
    'source',
    'ip_address',
    'user_agent',
    'status_code',
    'response_size',
    'processing_time',
    'parsed_fields',
    'error_message',
)


@dataclass
class ParsedRecord:
    """Outcome of parsing one non-blank line.

    ``error`` is set only for lines that could not be parsed; such records
    carry the raw line as their message and the level ``unknown``.
    """

    line_number: int  # 1-based
    raw_line: str
    timestamp: str | None = None  # ISO-8601, UTC
    level: str = 'info'
    message: str | None = None
    source: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    status_code: int | None = None
    response_size: int | None = None
    processing_time: int | None = None
    parsed_fields: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Storage-shaped dict keyed by STORAGE_COLUMNS, parsed_fields as JSON text."""
        return dict(zip(STORAGE_COLUMNS, self.to_row()))

    def to_row(self) -> tuple:
        """Values in STORAGE_COLUMNS order."""
        return (
            self.line_number,
            self.raw_line,
            self.timestamp,
            self.level,
            self.message,
            self.source,
            self.ip_address,
            self.user_agent,
            self.status_code,
            self.response_size,
            self.processing_time,
            json.dumps(self.parsed_fields, default=str),
            self.error,
        )


@dataclass
class ParseFailure:
    """A line the parser could not interpret. Converted to an error record by the engine."""

    line_number: int
    raw_line: str
    reason: str

    def to_record(self) -> ParsedRecord:
        return ParsedRecord(
            line_number=self.line_number,
            raw_line=self.raw_line,
            level='unknown',
            message=self.raw_line,
            error=self.reason,
        )


@dataclass
class PatternRecord:
    """A generalized message template and its occurrence statistics."""

    template: str
    frequency: int
    first_seen: str
    last_seen: str
    severity: str = 'info'
    examples: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ParseStats:
    """Line counters for one run. total_lines == parsed + error + skipped."""

    total_lines: int = 0
    parsed_lines: int = 0
    error_lines: int = 0
    skipped_lines: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ParseProgress:
    """Snapshot handed to progress callbacks. The total is unknown mid-stream."""

    processed: int
    parsed: int
    errors: int


@dataclass
class ParseResult:
    """Everything a parse run produces."""

    format_id: str
    format_name: str
    stats: ParseStats
    entries: list[ParsedRecord] = field(default_factory=list)
    patterns: list[PatternRecord] = field(default_factory=list)
    delimiter: str | None = None
    completed: bool = True  # False when the line source was closed mid-run
    elapsed_seconds: float = 0.0

    def to_dict(self, include_entries: bool = True) -> dict[str, Any]:
        data = {
            'format_id': self.format_id,
            'format_name': self.format_name,
            'delimiter': self.delimiter,
            'completed': self.completed,
            'elapsed_seconds': self.elapsed_seconds,
            'stats': self.stats.to_dict(),
            'patterns': [p.to_dict() for p in self.patterns],
        }
        if include_entries:
            data['entries'] = [r.to_dict() for r in self.entries]
        return data
