"""Single-line parsing for the three descriptor variants.

parse_line() never raises for malformed input. A line that does not fit its
descriptor comes back as a ParseFailure value, which the engine turns into an
error-flagged record and moves on.
"""

import json
import logging
from datetime import datetime
from typing import Any

from logscope.formats import DelimitedFormat, FormatDescriptor, SemiStructuredFormat, StructuredTextFormat
from logscope.normalize import normalize_level, normalize_timestamp
from logscope.records import ParsedRecord, ParseFailure


logger = logging.getLogger(__name__)

# Key aliases, first present key wins
TIMESTAMP_KEYS = ('timestamp', '@timestamp', 'time', 'date')
LEVEL_KEYS = ('level', 'severity', 'priority', 'loglevel')
MESSAGE_KEYS = ('message', 'msg', 'content')
SOURCE_KEYS = ('source', 'logger', 'service', 'application')
IP_KEYS = ('ip', 'client_ip', 'remote_addr')
STATUS_KEYS = ('status', 'status_code')
SIZE_KEYS = ('size', 'bytes')

# Field names promoted from delimited columns
DELIMITED_TIMESTAMP_KEYS = ('timestamp', 'time', 'date')
DELIMITED_LEVEL_KEYS = ('level', 'severity')
DELIMITED_MESSAGE_KEYS = ('message', 'msg')

# Field names promoted from regex captures
TEXT_SOURCE_KEYS = ('hostname', 'server', 'process', 'logger', 'unit')
TEXT_IP_KEYS = ('ip', 'client_ip')
TEXT_MESSAGE_FALLBACK_KEYS = ('message', 'request')
DURATION_KEYS = ('time_taken', 'duration')


def _first(data: dict, keys: tuple[str, ...]):
    """Return the first value among keys that is neither None nor empty."""
    for key in keys:
        value = data.get(key)
        if value not in (None, ''):
            return value
    return None


def _to_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text or text == '-':
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except ValueError:
        return None


def _to_text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class LineParser:
    """Parses raw lines according to a format descriptor.

    Args:
        reference_time: Supplies the year for syslog-style timestamps that
            lack one. Defaults to the time the parser was created.
    """

    def __init__(self, reference_time: datetime | None = None):
        self.reference_time = reference_time

    def parse_line(
        self,
        raw_line: str,
        descriptor: FormatDescriptor,
        line_number: int,
        delimiter: str | None = None,
    ) -> ParsedRecord | ParseFailure:
        """Parse one line.

        Args:
            raw_line: The line text without its terminator
            descriptor: Format to apply
            line_number: 1-based line number
            delimiter: Overrides the descriptor's delimiter for delimited formats

        Returns:
            ParsedRecord on success, ParseFailure when the line does not fit.
        """
        try:
            if isinstance(descriptor, SemiStructuredFormat):
                return self._parse_semi_structured(raw_line, line_number)
            elif isinstance(descriptor, DelimitedFormat):
                return self._parse_delimited(raw_line, descriptor, line_number, delimiter)
            elif isinstance(descriptor, StructuredTextFormat):
                return self._parse_structured_text(raw_line, descriptor, line_number)
        except (ValueError, TypeError, KeyError, IndexError, AttributeError, OverflowError, RecursionError) as e:
            return ParseFailure(line_number, raw_line, f'Failed to parse line: {e}')

        raise TypeError(f'Unhandled format descriptor type: {type(descriptor).__name__}')

    def _timestamp(self, value) -> str | None:
        return normalize_timestamp(value, self.reference_time)

    def _parse_semi_structured(self, raw_line: str, line_number: int) -> ParsedRecord | ParseFailure:
        try:
            data = json.loads(raw_line)
        except json.JSONDecodeError as e:
            return ParseFailure(line_number, raw_line, f'Invalid JSON: {e.msg} at column {e.colno}')
        if not isinstance(data, dict):
            return ParseFailure(line_number, raw_line, f'Expected a JSON object, got {type(data).__name__}')

        return ParsedRecord(
            line_number=line_number,
            raw_line=raw_line,
            timestamp=self._timestamp(_first(data, TIMESTAMP_KEYS)),
            level=normalize_level(_first(data, LEVEL_KEYS)),
            message=_to_text(_first(data, MESSAGE_KEYS)) or raw_line,
            source=_to_text(_first(data, SOURCE_KEYS)),
            ip_address=_to_text(_first(data, IP_KEYS)),
            user_agent=_to_text(data.get('user_agent')),
            status_code=_to_int(_first(data, STATUS_KEYS)),
            response_size=_to_int(_first(data, SIZE_KEYS)),
            processing_time=_to_int(_first(data, DURATION_KEYS)),
            parsed_fields=data,
        )

    def _parse_delimited(
        self,
        raw_line: str,
        descriptor: DelimitedFormat,
        line_number: int,
        delimiter: str | None,
    ) -> ParsedRecord:
        values = raw_line.split(delimiter or descriptor.effective_delimiter)
        names = descriptor.fields

        fields: dict[str, Any] = {}
        for index, value in enumerate(values):
            name = names[index] if index < len(names) else f'field_{index + 1}'
            fields[name] = value.strip()

        record = ParsedRecord(line_number=line_number, raw_line=raw_line, parsed_fields=fields)
        timestamp = _first(fields, DELIMITED_TIMESTAMP_KEYS)
        if timestamp:
            record.timestamp = self._timestamp(timestamp)
        level = _first(fields, DELIMITED_LEVEL_KEYS)
        if level:
            record.level = normalize_level(level)
        message = _first(fields, DELIMITED_MESSAGE_KEYS)
        if message:
            record.message = message
        return record

    def _parse_structured_text(
        self,
        raw_line: str,
        descriptor: StructuredTextFormat,
        line_number: int,
    ) -> ParsedRecord | ParseFailure:
        match = descriptor.pattern.match(raw_line)
        if not match:
            return ParseFailure(line_number, raw_line, f'Line does not match {descriptor.name} pattern')

        fields: dict[str, Any] = {}
        for name, value in zip(descriptor.fields, match.groups()):
            # Unmatched optional groups are left out
            if value is not None:
                fields[name] = value

        timestamp = fields.get('timestamp')
        if timestamp is None and 'date' in fields and 'time' in fields:
            timestamp = f'{fields["date"]} {fields["time"]}'

        message = _first(fields, TEXT_MESSAGE_FALLBACK_KEYS)
        if message is None and 'method' in fields and 'uri' in fields:
            message = f'{fields["method"]} {fields["uri"]}'

        return ParsedRecord(
            line_number=line_number,
            raw_line=raw_line,
            timestamp=self._timestamp(timestamp),
            level=normalize_level(fields.get('level') or fields.get('severity')),
            message=message,
            source=_first(fields, TEXT_SOURCE_KEYS),
            ip_address=_first(fields, TEXT_IP_KEYS),
            user_agent=fields.get('user_agent'),
            status_code=_to_int(fields.get('status')),
            response_size=_to_int(fields.get('size')),
            processing_time=_to_int(_first(fields, DURATION_KEYS)),
            parsed_fields=fields,
        )


_default_parser = LineParser()


def parse_line(
    raw_line: str,
    descriptor: FormatDescriptor,
    line_number: int,
    delimiter: str | None = None,
) -> ParsedRecord | ParseFailure:
    """Parse one line with a parser using the current time as syslog reference."""
    return _default_parser.parse_line(raw_line, descriptor, line_number, delimiter)
