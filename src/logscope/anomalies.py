"""Rule-based anomaly detection over parsed records and patterns.

All thresholds compare integers so boundary cases are exact: an error share
of exactly 10% or an IP at exactly ten times the mean is not reported.
"""

import logging
from collections import Counter
from collections.abc import Sequence

from logscope.models import Anomaly
from logscope.records import ParsedRecord, PatternRecord


logger = logging.getLogger(__name__)

ERROR_LEVELS = ('error', 'critical', 'emergency')

# Error records must exceed 1/ERROR_RATE_DIVISOR of all records
ERROR_RATE_DIVISOR = 10

# An IP must exceed this multiple of the mean per-IP request count
IP_ACTIVITY_FACTOR = 10

FREQUENT_PATTERN_THRESHOLD = 100

SEVERITY_ORDER = {'error': 0, 'warning': 1, 'info': 2}


def _high_error_rate(entries: Sequence[ParsedRecord]) -> list[Anomaly]:
    total = len(entries)
    errors = sum(1 for entry in entries if entry.level in ERROR_LEVELS)
    if not total or errors * ERROR_RATE_DIVISOR <= total:
        return []
    return [
        Anomaly(
            type='high_error_rate',
            severity='warning',
            message=f'High error rate: {errors} of {total} records ({errors / total * 100:.1f}%)',
            count=errors,
        )
    ]


def _suspicious_ips(entries: Sequence[ParsedRecord]) -> list[Anomaly]:
    counts = Counter(entry.ip_address for entry in entries if entry.ip_address)
    if not counts:
        return []

    distinct = len(counts)
    total = sum(counts.values())
    anomalies = []
    for ip, count in counts.items():
        # count > FACTOR * (total / distinct)
        if count * distinct > IP_ACTIVITY_FACTOR * total:
            anomalies.append(
                Anomaly(
                    type='suspicious_ip_activity',
                    severity='error',
                    message=f'Suspicious activity from {ip}: {count} requests (mean {total / distinct:.1f})',
                    count=count,
                    ip=ip,
                )
            )
    return anomalies


def _frequent_error_patterns(patterns: Sequence[PatternRecord]) -> list[Anomaly]:
    return [
        Anomaly(
            type='frequent_error_pattern',
            severity='warning',
            message=f'Frequent error pattern ({pattern.frequency} occurrences): {pattern.template}',
            pattern=pattern.template,
            frequency=pattern.frequency,
        )
        for pattern in patterns
        if pattern.severity == 'error' and pattern.frequency > FREQUENT_PATTERN_THRESHOLD
    ]


def detect_anomalies(entries: Sequence[ParsedRecord], patterns: Sequence[PatternRecord]) -> list[Anomaly]:
    """
    Apply the anomaly rules to one parse run.

    Args:
        entries: All records of the run, error records included
        patterns: Tracked patterns with classified severity

    Returns:
        Anomalies sorted error, warning, info (stable within a severity)
    """
    anomalies = _high_error_rate(entries) + _suspicious_ips(entries) + _frequent_error_patterns(patterns)
    anomalies.sort(key=lambda a: SEVERITY_ORDER.get(a.severity, len(SEVERITY_ORDER)))
    if anomalies:
        logger.debug(f'[SUMMARY] {len(anomalies)} anomalies detected')
    return anomalies
