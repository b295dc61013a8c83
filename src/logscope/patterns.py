"""Message template generalization and per-template statistics."""

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime

from logscope.normalize import format_iso
from logscope.records import ParsedRecord, PatternRecord


logger = logging.getLogger(__name__)

# Tracker keeps this many verbatim examples per template
MAX_TRACKED_EXAMPLES = 5

# Examples carried by the public patterns list
MAX_PUBLIC_EXAMPLES = 3

# Substitutions applied in order; placeholders contain no digits so the
# result is stable under repeated generalization
GENERALIZATION_RULES = [
    (re.compile(r'\b(?:\d{1,3}\.){3}\d{1,3}\b'), 'IP_ADDRESS'),
    (re.compile(r'\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}:\d{2}(?:[.,]\d+)?(?:Z|[+-]\d{2}:?\d{2})?'), 'TIMESTAMP'),
    (re.compile(r'\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b'), 'UUID'),
    (re.compile(r'\d+'), 'NUMBER'),
]

ERROR_KEYWORDS = ['error', 'fail', 'exception', 'critical', 'fatal', 'denied', 'refused', 'timeout']

WARNING_KEYWORDS = ['warning', 'warn', 'deprecated', 'slow', 'retry', 'fallback']


def generalize(message: str) -> str:
    """Replace dynamic tokens in a message with placeholders.

    IPv4 addresses become IP_ADDRESS, ISO-like date-times TIMESTAMP, UUIDs
    UUID, and any remaining digit runs NUMBER.
    """
    template = message
    for pattern, placeholder in GENERALIZATION_RULES:
        template = pattern.sub(placeholder, template)
    return template


def classify_severity(template: str) -> str:
    """Classify a template as 'error', 'warning' or 'info' by keyword."""
    lowered = template.lower()
    for keyword in ERROR_KEYWORDS:
        if keyword in lowered:
            return 'error'
    for keyword in WARNING_KEYWORDS:
        if keyword in lowered:
            return 'warning'
    return 'info'


@dataclass
class _TemplateStats:
    frequency: int
    first_seen: str
    last_seen: str
    examples: list[str] = field(default_factory=list)


class PatternTracker:
    """Groups record messages by generalized template.

    One tracker belongs to one parse run. Templates are kept in first-seen
    order.
    """

    def __init__(self):
        self._templates: dict[str, _TemplateStats] = {}

    def __len__(self) -> int:
        return len(self._templates)

    def track(self, record: ParsedRecord) -> None:
        """Count a record's message under its template. Empty messages are ignored."""
        message = record.message
        if not message:
            return

        template = generalize(message)
        seen = record.timestamp or format_iso(datetime.now(UTC))
        stats = self._templates.get(template)

        if stats is None:
            self._templates[template] = _TemplateStats(
                frequency=1, first_seen=seen, last_seen=seen, examples=[message]
            )
            return

        stats.frequency += 1
        stats.last_seen = seen
        if len(stats.examples) < MAX_TRACKED_EXAMPLES:
            stats.examples.append(message)

    def examples(self, template: str) -> list[str]:
        """Tracked examples for a template (up to MAX_TRACKED_EXAMPLES)."""
        stats = self._templates.get(template)
        return list(stats.examples) if stats else []

    def to_list(self, max_examples: int = MAX_PUBLIC_EXAMPLES) -> list[PatternRecord]:
        """Export templates as PatternRecords with classified severity."""
        return [
            PatternRecord(
                template=template,
                frequency=stats.frequency,
                first_seen=stats.first_seen,
                last_seen=stats.last_seen,
                severity=classify_severity(template),
                examples=stats.examples[:max_examples],
            )
            for template, stats in self._templates.items()
        ]
