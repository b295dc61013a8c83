"""Prometheus metrics for logscope"""

from prometheus_client import Counter, Histogram


# ============================================================================
# Run Metrics
# ============================================================================

parse_runs_total = Counter(
    'logscope_parse_runs_total',
    'Total number of parse runs',
    ['status'],  # success, cancelled, error
)

detections_total = Counter(
    'logscope_detections_total',
    'Total number of format detection runs',
    ['result'],  # matched, no_match
)


# ============================================================================
# Line Metrics
# ============================================================================

lines_total = Counter(
    'logscope_lines_total',
    'Total number of lines processed',
    ['outcome'],  # parsed, error, skipped
)


# ============================================================================
# Performance Metrics
# ============================================================================

parse_duration_seconds = Histogram(
    'logscope_parse_duration_seconds',
    'Time spent parsing one file',
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    # 10ms to 5 minutes - small files up to multi-million line logs
)

detection_duration_seconds = Histogram(
    'logscope_detection_duration_seconds',
    'Time spent sampling and scoring formats',
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
    # 0.5ms to 1s - detection only reads a small sample
)


# ============================================================================
# Helper Functions
# ============================================================================


def record_parse_run(status: str, duration: float, parsed: int, errors: int, skipped: int):
    """
    Record metrics for a parse run.

    Args:
        status: Run status (success, cancelled, error)
        duration: Run duration in seconds
        parsed: Lines parsed successfully
        errors: Lines that failed to parse
        skipped: Blank lines
    """
    parse_runs_total.labels(status=status).inc()
    parse_duration_seconds.observe(duration)
    if parsed:
        lines_total.labels(outcome='parsed').inc(parsed)
    if errors:
        lines_total.labels(outcome='error').inc(errors)
    if skipped:
        lines_total.labels(outcome='skipped').inc(skipped)


def record_detection(matched: bool, duration: float):
    """
    Record metrics for a detection run.

    Args:
        matched: Whether a format cleared the confidence floor
        duration: Detection duration in seconds
    """
    detections_total.labels(result='matched' if matched else 'no_match').inc()
    detection_duration_seconds.observe(duration)
