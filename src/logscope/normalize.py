"""Timestamp and severity normalization.

Both functions are total: anything they cannot interpret maps to a soft
default (no timestamp, ``info`` level) instead of raising.
"""

import re
from datetime import UTC, datetime, timedelta

from dateutil import parser as date_parser


SEVERITY_LEVELS = ('emergency', 'alert', 'critical', 'error', 'warning', 'notice', 'info', 'debug')

DEFAULT_LEVEL = 'info'

# Level assigned to records for lines that could not be parsed
UNKNOWN_LEVEL = 'unknown'

LEVEL_MAP = {
    'emerg': 'emergency',
    'emergency': 'emergency',
    '0': 'emergency',
    'alert': 'alert',
    '1': 'alert',
    'crit': 'critical',
    'critical': 'critical',
    'fatal': 'critical',
    '2': 'critical',
    'error': 'error',
    '3': 'error',
    'warn': 'warning',
    'warning': 'warning',
    '4': 'warning',
    'notice': 'notice',
    '5': 'notice',
    'info': 'info',
    'information': 'info',
    '6': 'info',
    'debug': 'debug',
    '7': 'debug',
    # Redis log markers
    '#': 'warning',
    '*': 'notice',
    '-': 'info',
    '.': 'debug',
}

_MONTHS = {
    'jan': 1,
    'feb': 2,
    'mar': 3,
    'apr': 4,
    'may': 5,
    'jun': 6,
    'jul': 7,
    'aug': 8,
    'sep': 9,
    'oct': 10,
    'nov': 11,
    'dec': 12,
}

# Fallback patterns, tried in order after general-purpose parsing fails
WEB_TIMESTAMP_PATTERN = re.compile(
    r'\[?(\d{2})/(\w{3})/(\d{4}):(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?\s*([+-]\d{4})?\]?'
)
SYSLOG_TIMESTAMP_PATTERN = re.compile(r'(\w{3})\s+(\d{1,2})\s+(\d{2}):(\d{2}):(\d{2})')
ISO_LIKE_TIMESTAMP_PATTERN = re.compile(r'(\d{4})-(\d{2})-(\d{2})[\sT](\d{2}):(\d{2}):(\d{2})(?:[.,](\d+))?')


def normalize_level(level) -> str:
    """Map a raw level token to the severity enum.

    Accepts words and syslog numeric codes 0-7, case-insensitively.
    Anything unrecognized (including None) is ``info``.
    """
    if level is None:
        return DEFAULT_LEVEL
    level_str = str(level).strip().strip('[]<>').strip().lower()
    if not level_str:
        return DEFAULT_LEVEL
    return LEVEL_MAP.get(level_str, DEFAULT_LEVEL)


def format_iso(dt: datetime) -> str:
    """Render a datetime as UTC ISO-8601 with millisecond precision and a Z suffix.

    Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f'{dt.microsecond // 1000:03d}Z'


def _fraction_to_microseconds(fraction: str | None) -> int:
    if not fraction:
        return 0
    return int(fraction[:6].ljust(6, '0'))


def _offset_seconds(offset: str | None) -> int:
    if not offset:
        return 0
    sign = -1 if offset[0] == '-' else 1
    return sign * (int(offset[1:3]) * 3600 + int(offset[3:5]) * 60)


def _parse_web_timestamp(value: str) -> datetime | None:
    match = WEB_TIMESTAMP_PATTERN.search(value)
    if not match:
        return None
    day, month_name, year, hour, minute, second, fraction, offset = match.groups()
    month = _MONTHS.get(month_name.lower())
    if month is None:
        return None
    dt = datetime(
        int(year), month, int(day), int(hour), int(minute), int(second), _fraction_to_microseconds(fraction), tzinfo=UTC
    )
    return dt - timedelta(seconds=_offset_seconds(offset))


def _parse_syslog_timestamp(value: str, reference: datetime) -> datetime | None:
    match = SYSLOG_TIMESTAMP_PATTERN.search(value)
    if not match:
        return None
    month_name, day, hour, minute, second = match.groups()
    month = _MONTHS.get(month_name.lower())
    if month is None:
        return None
    return datetime(reference.year, month, int(day), int(hour), int(minute), int(second), tzinfo=UTC)


def _parse_iso_like_timestamp(value: str) -> datetime | None:
    match = ISO_LIKE_TIMESTAMP_PATTERN.search(value)
    if not match:
        return None
    year, month, day, hour, minute, second, fraction = match.groups()
    return datetime(
        int(year),
        int(month),
        int(day),
        int(hour),
        int(minute),
        int(second),
        _fraction_to_microseconds(fraction),
        tzinfo=UTC,
    )


def normalize_timestamp(value, reference: datetime | None = None) -> str | None:
    """Convert a raw timestamp-like string into an ISO-8601 UTC string.

    The bracketed web server style (``10/Oct/2000:13:55:36 -0700``) is
    recognized first, then general-purpose parsing is tried; if that fails,
    the syslog style (year taken from ``reference``) and an ISO-like style
    are tried in that order.

    Args:
        value: Raw timestamp text (or None)
        reference: Datetime supplying the year for syslog-style stamps and
            the defaults for general-purpose parsing. Defaults to now (UTC).

    Returns:
        ISO-8601 string, or None when nothing could be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # Unix epoch, seconds or milliseconds
        seconds = value / 1000 if value > 1e12 else value
        try:
            return format_iso(datetime.fromtimestamp(seconds, tz=UTC))
        except (ValueError, OverflowError, OSError):
            return None
    value = str(value).strip()
    if not value:
        return None

    if reference is None:
        reference = datetime.now(UTC)

    # dateutil does not read the colon between date and time in web stamps
    try:
        dt = _parse_web_timestamp(value)
    except (ValueError, OverflowError):
        dt = None
    if dt is not None:
        return format_iso(dt)

    try:
        default = reference.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
        return format_iso(date_parser.parse(value, default=default))
    except (ValueError, OverflowError, TypeError):
        pass

    for fallback in (
        lambda v: _parse_syslog_timestamp(v, reference),
        _parse_iso_like_timestamp,
    ):
        try:
            dt = fallback(value)
        except (ValueError, OverflowError):
            continue
        if dt is not None:
            return format_iso(dt)

    return None
