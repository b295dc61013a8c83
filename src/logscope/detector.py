"""Format detection by sampling.

The detector reads the first non-blank lines of a file, scores every catalog
entry against them and reports the best one if it clears a confidence floor.
A generic delimited hypothesis (which separator splits the sample into a
consistent number of columns) is scored after all catalog patterns, so a real
pattern always wins a tie with it.
"""

import json
import logging
import math
import os
import time
from collections.abc import Iterable
from dataclasses import dataclass

from logscope.cli import prometheus as prom
from logscope.formats import (
    FORMATS,
    DelimitedFormat,
    FormatDescriptor,
    SemiStructuredFormat,
    StructuredTextFormat,
)
from logscope.line_source import LineSource
from logscope.models import DetectionResult, FormatMatch, FormatScore
from logscope.utils import get_sample_size


logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_FLOOR = 0.70
DEFAULT_DELIMITER_FLOOR = 0.80

# Separators tried by the delimited hypothesis, in tie-break order
CANDIDATE_DELIMITERS = (',', '\t', '|', ';', ' ')

# A delimited hypothesis needs at least this many columns on average
MIN_DELIMITED_FIELDS = 3

PREVIEW_LINES = 10


class FormatDetectionError(RuntimeError):
    """Raised when no format clears the confidence floor for a file."""

    def __init__(self, path: str, best_score: float = 0.0, best_format: str | None = None):
        self.path = path
        self.best_score = best_score
        self.best_format = best_format
        detail = f'best candidate {best_format} at {best_score:.0%}' if best_format else 'no candidate matched'
        super().__init__(f'Could not detect log format for {os.path.basename(path)} ({detail})')


@dataclass
class DelimiterHypothesis:
    """Best separator found for a sample."""

    delimiter: str
    average_fields: float
    consistency: float  # fraction of lines whose field count equals the rounded mean


def _is_json_object(line: str) -> bool:
    try:
        return isinstance(json.loads(line), dict)
    except (ValueError, RecursionError):
        return False


def _rounded_mean(counts: list[int]) -> int:
    """Mean field count rounded half-up."""
    return math.floor(sum(counts) / len(counts) + 0.5)


def infer_delimiter(lines: list[str]) -> DelimiterHypothesis | None:
    """Pick the separator that splits lines into the most consistent column count.

    Only separators averaging at least MIN_DELIMITED_FIELDS columns qualify.
    A line is consistent when its column count equals the mean rounded
    half-up, so ``[4, 4, 4, 5]`` is 75% consistent.

    Returns:
        The best hypothesis, or None when no separator qualifies.
    """
    if not lines:
        return None

    best = None
    for delimiter in CANDIDATE_DELIMITERS:
        counts = [len(line.split(delimiter)) for line in lines]
        average = sum(counts) / len(counts)
        if average < MIN_DELIMITED_FIELDS:
            continue
        target = _rounded_mean(counts)
        consistency = sum(1 for c in counts if c == target) / len(counts)
        if best is None or consistency > best.consistency:
            best = DelimiterHypothesis(delimiter, average, consistency)
    return best


class FormatDetector:
    """Scores catalog formats against a sample of lines.

    Args:
        sample_size: Non-blank lines to sample. Defaults to LOGSCOPE_SAMPLE_SIZE or 50.
        confidence_floor: Minimum score for a match to be accepted
        delimiter_floor: Minimum column consistency for the delimited hypothesis to compete
        formats: Catalog to score, in priority order
    """

    def __init__(
        self,
        sample_size: int | None = None,
        confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR,
        delimiter_floor: float = DEFAULT_DELIMITER_FLOOR,
        formats: tuple[FormatDescriptor, ...] = FORMATS,
    ):
        self.sample_size = sample_size if sample_size and sample_size > 0 else get_sample_size()
        self.confidence_floor = confidence_floor
        self.delimiter_floor = delimiter_floor
        self.formats = formats

    def sample(self, lines: Iterable[str]) -> list[str]:
        """Collect up to sample_size stripped non-blank lines."""
        samples = []
        for line in lines:
            stripped = line.strip()
            if not stripped:
                continue
            samples.append(stripped)
            if len(samples) >= self.sample_size:
                break
        return samples

    def detect(self, source: Iterable[str]) -> DetectionResult:
        """Detect the format of a line source.

        The source is closed after sampling when it has a close() method.

        Args:
            source: LineSource or any iterable of lines

        Returns:
            DetectionResult with the accepted match (or None) and every score
        """
        start_time = time.time()
        try:
            samples = self.sample(source)
        finally:
            close = getattr(source, 'close', None)
            if callable(close):
                close()

        result = self.detect_lines(samples)
        prom.record_detection(result.best_match is not None, time.time() - start_time)
        return result

    def detect_file(self, path: str) -> DetectionResult:
        """Detect the format of a file. Raises like LineSource for missing or unsupported files."""
        logger.debug(f'[DETECT] Sampling {path} ({self.sample_size} lines)')
        return self.detect(LineSource(path))

    def detect_lines(self, samples: list[str]) -> DetectionResult:
        """Score an already collected sample."""
        total = len(samples)
        all_scores: dict[str, FormatScore] = {}
        best_descriptor = None
        best_score = 0.0
        hypothesis = None

        for descriptor in self.formats:
            if isinstance(descriptor, DelimitedFormat):
                hypothesis = infer_delimiter(samples)
                score = hypothesis.consistency if hypothesis else 0.0
                all_scores[descriptor.id] = FormatScore(
                    score=score,
                    matches=round(score * total),
                    total=total,
                    name=descriptor.name,
                    delimiter=descriptor.delimiter or (hypothesis.delimiter if hypothesis else None),
                    average_fields=hypothesis.average_fields if hypothesis else None,
                )
                if hypothesis is None or hypothesis.consistency < self.delimiter_floor:
                    # Inconsistent columns never compete with the structured scores
                    score = 0.0
            else:
                matches = self._count_matches(descriptor, samples)
                score = matches / total if total else 0.0
                all_scores[descriptor.id] = FormatScore(
                    score=score, matches=matches, total=total, name=descriptor.name
                )

            # Strict comparison keeps the earliest entry on ties
            if score > best_score:
                best_score = score
                best_descriptor = descriptor

        best_match = None
        best_id = best_descriptor.id if best_descriptor else None
        if best_descriptor is not None and best_score >= self.confidence_floor:
            best = all_scores[best_id]
            best_match = FormatMatch(
                id=best_id,
                name=best.name,
                score=best.score,
                matches=best.matches,
                total=best.total,
                delimiter=best.delimiter,
            )
            logger.info(f'[DETECT] Detected {best_id} ({best_score:.0%} of {total} lines)')
        else:
            logger.info(f'[DETECT] No format detected (best {best_id or "none"} at {best_score:.0%})')

        return DetectionResult(
            best_match=best_match,
            all_scores=all_scores,
            sample_preview=samples[:PREVIEW_LINES],
        )

    def _count_matches(self, descriptor: FormatDescriptor, samples: list[str]) -> int:
        if isinstance(descriptor, StructuredTextFormat):
            return sum(1 for line in samples if descriptor.matches(line))
        elif isinstance(descriptor, SemiStructuredFormat):
            return sum(1 for line in samples if _is_json_object(line))
        raise TypeError(f'Unhandled format descriptor type: {type(descriptor).__name__}')

