"""Aggregate statistics for a parse result."""

import logging
import math
from collections import Counter
from datetime import datetime

from logscope.anomalies import detect_anomalies
from logscope.models import (
    AnalysisSummary,
    HttpStats,
    NetworkStats,
    Overview,
    PatternSummary,
    SourceStats,
    TimeAnalysis,
    TimeRange,
)
from logscope.records import ParseResult


logger = logging.getLogger(__name__)

TOP_SOURCES = 10
SAMPLE_IPS = 20
TOP_PATTERNS = 20


def _percent(part: int, whole: int) -> int:
    """Percentage rounded half-up; 0 for an empty whole."""
    if not whole:
        return 0
    return math.floor(part * 100 / whole + 0.5)


def _parse_iso(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _time_analysis(result: ParseResult) -> TimeAnalysis:
    hourly: Counter[int] = Counter()
    earliest = latest = None
    for entry in result.entries:
        if not entry.timestamp:
            continue
        dt = _parse_iso(entry.timestamp)
        if dt is None:
            continue
        hourly[dt.hour] += 1
        if earliest is None or dt < earliest[0]:
            earliest = (dt, entry.timestamp)
        if latest is None or dt > latest[0]:
            latest = (dt, entry.timestamp)

    time_range = None
    if earliest is not None:
        time_range = TimeRange(
            start=earliest[1],
            end=latest[1],
            duration_ms=int((latest[0] - earliest[0]).total_seconds() * 1000),
        )
    return TimeAnalysis(hourly_activity=dict(sorted(hourly.items())), time_range=time_range)


def summarize(result: ParseResult) -> AnalysisSummary:
    """
    Build the analysis summary of a parse result.

    Args:
        result: Completed (or partial) parse result

    Returns:
        AnalysisSummary with overview, distributions, top patterns and anomalies
    """
    stats = result.stats
    entries = result.entries

    sources = Counter(entry.source for entry in entries if entry.source)

    ips: dict[str, None] = {}
    for entry in entries:
        if entry.ip_address:
            ips.setdefault(entry.ip_address, None)

    status_codes = Counter(entry.status_code for entry in entries if entry.status_code is not None)

    patterns = sorted(result.patterns, key=lambda p: p.frequency, reverse=True)

    summary = AnalysisSummary(
        format_id=result.format_id,
        format_name=result.format_name,
        overview=Overview(
            total_lines=stats.total_lines,
            parsed_lines=stats.parsed_lines,
            error_lines=stats.error_lines,
            skipped_lines=stats.skipped_lines,
            success_rate=_percent(stats.parsed_lines, stats.total_lines),
        ),
        log_levels=dict(Counter(entry.level for entry in entries)),
        time_analysis=_time_analysis(result),
        sources=SourceStats(top_sources=sources.most_common(TOP_SOURCES), unique_count=len(sources)),
        network=NetworkStats(unique_ips=len(ips), sample_ips=list(ips)[:SAMPLE_IPS]),
        http_analysis=HttpStats(status_codes=dict(sorted(status_codes.items())), total_requests=sum(status_codes.values())),
        patterns=[
            PatternSummary(
                template=p.template,
                frequency=p.frequency,
                severity=p.severity,
                first_seen=p.first_seen,
                last_seen=p.last_seen,
                examples=p.examples,
            )
            for p in patterns[:TOP_PATTERNS]
        ],
        anomalies=detect_anomalies(entries, patterns),
    )
    logger.debug(f'[SUMMARY] Summarized {stats.total_lines} lines for {result.format_id}')
    return summary
