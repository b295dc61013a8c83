"""Parse orchestration: detection, line-by-line parsing and pattern tracking."""

import logging
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from logscope import detector as detector_module
from logscope.cli import prometheus as prom
from logscope.detector import FormatDetectionError, FormatDetector
from logscope.formats import DelimitedFormat, FormatDescriptor, get_format
from logscope.line_source import LineSource
from logscope.models import AnalysisSummary
from logscope.parser import LineParser
from logscope.patterns import MAX_PUBLIC_EXAMPLES, PatternTracker
from logscope.records import ParsedRecord, ParseFailure, ParseProgress, ParseResult, ParseStats
from logscope.summary import summarize
from logscope.utils import get_progress_interval


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ParseProgress], None]


def enable_metrics() -> None:
    """Replace the no-op metrics stub with real Prometheus metrics."""
    global prom
    from logscope import prometheus as real_prom

    prom = real_prom
    detector_module.prom = real_prom


class LogParser:
    """Parses whole log files into a ParseResult.

    A LogParser holds configuration only. Every run builds its own line
    parser, pattern tracker and result, so one instance can serve several
    runs at the same time.

    Args:
        detector: Detector used when no format id is given
        progress_interval: Lines between progress callbacks. Defaults to
            LOGSCOPE_PROGRESS_INTERVAL or 1000.
    """

    def __init__(self, detector: FormatDetector | None = None, progress_interval: int | None = None):
        self.detector = detector or FormatDetector()
        self.progress_interval = (
            progress_interval if progress_interval and progress_interval > 0 else get_progress_interval()
        )

    def parse(
        self,
        path: str,
        format_id: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ParseResult:
        """Parse a file.

        Args:
            path: Plain or gzip-compressed log file
            format_id: Catalog id to force; detected when None
            on_progress: Called every progress_interval lines

        Returns:
            ParseResult for the whole file, or a partial one with
            ``completed=False`` when the source was closed mid-run

        Raises:
            UnknownFormatError: format_id is not in the catalog
            FormatDetectionError: No format cleared the confidence floor
            UnsupportedCompressionError: File uses a compression other than gzip
            FileNotFoundError: File does not exist
        """
        path = str(path)
        delimiter = None

        if format_id:
            descriptor = get_format(format_id)
            if isinstance(descriptor, DelimitedFormat) and descriptor.delimiter is None:
                detection = self.detector.detect_file(path)
                delimiter = detection.all_scores[descriptor.id].delimiter
        else:
            detection = self.detector.detect_file(path)
            if detection.best_match is None:
                best_id, best = max(
                    detection.all_scores.items(), key=lambda item: item[1].score, default=(None, None)
                )
                if best is None or best.score == 0:
                    raise FormatDetectionError(path)
                raise FormatDetectionError(path, best.score, best_id)
            descriptor = get_format(detection.best_match.id)
            delimiter = detection.best_match.delimiter

        logger.info(f'[PARSE] Parsing {path} as {descriptor.id}')
        with LineSource(path) as source:
            return self.parse_source(source, descriptor, on_progress=on_progress, delimiter=delimiter)

    def parse_source(
        self,
        source: Iterable[str],
        descriptor: FormatDescriptor,
        on_progress: ProgressCallback | None = None,
        delimiter: str | None = None,
    ) -> ParseResult:
        """Parse every line of an open source with a known format.

        Closing a LineSource while this runs stops the run at the next line;
        the partial result is returned with ``completed=False``.
        """
        start_time = time.time()
        line_parser = LineParser(reference_time=datetime.now(UTC))
        tracker = PatternTracker()
        stats = ParseStats()
        entries: list[ParsedRecord] = []

        if isinstance(descriptor, DelimitedFormat):
            delimiter = delimiter or descriptor.effective_delimiter

        status = 'error'
        try:
            for line_number, raw_line in enumerate(source, start=1):
                stats.total_lines += 1

                if not raw_line.strip():
                    stats.skipped_lines += 1
                else:
                    outcome = line_parser.parse_line(raw_line, descriptor, line_number, delimiter)
                    if isinstance(outcome, ParseFailure):
                        logger.debug(f'[PARSE] Line {line_number}: {outcome.reason}')
                        entries.append(outcome.to_record())
                        stats.error_lines += 1
                    else:
                        entries.append(outcome)
                        stats.parsed_lines += 1
                        tracker.track(outcome)

                if on_progress is not None and stats.total_lines % self.progress_interval == 0:
                    self._notify(on_progress, stats)

            completed = getattr(source, 'exhausted', True)
            status = 'success' if completed else 'cancelled'
        finally:
            elapsed = time.time() - start_time
            prom.record_parse_run(status, elapsed, stats.parsed_lines, stats.error_lines, stats.skipped_lines)

        if completed:
            logger.info(
                f'[PARSE] Completed {descriptor.id}: {stats.total_lines} lines, '
                f'{stats.parsed_lines} parsed, {stats.error_lines} errors, '
                f'{stats.skipped_lines} blank in {elapsed:.2f}s'
            )
        else:
            logger.info(f'[PARSE] Cancelled after {stats.total_lines} lines')

        return ParseResult(
            format_id=descriptor.id,
            format_name=descriptor.name,
            stats=stats,
            entries=entries,
            patterns=tracker.to_list(max_examples=MAX_PUBLIC_EXAMPLES),
            delimiter=delimiter if isinstance(descriptor, DelimitedFormat) else None,
            completed=completed,
            elapsed_seconds=elapsed,
        )

    def parse_and_summarize(
        self,
        path: str,
        format_id: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[ParseResult, AnalysisSummary]:
        """Parse a file and build its analysis summary."""
        result = self.parse(path, format_id=format_id, on_progress=on_progress)
        return result, summarize(result)

    @staticmethod
    def _notify(on_progress: ProgressCallback, stats: ParseStats) -> None:
        progress = ParseProgress(processed=stats.total_lines, parsed=stats.parsed_lines, errors=stats.error_lines)
        try:
            on_progress(progress)
        except Exception as e:
            logger.warning(f'[PARSE] Progress callback failed at line {stats.total_lines}: {e}')
