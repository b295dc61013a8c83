"""Pydantic models for detection results and analysis reports"""

from pydantic import BaseModel, Field


# ANSI color codes used by the to_cli() renderers
BOLD = '\033[1m'
RED = '\033[91m'
YELLOW = '\033[33m'
GREEN = '\033[32m'
GREY = '\033[90m'
RESET = '\033[0m'


class FormatScore(BaseModel):
    """How well one candidate format matched the detection sample."""

    score: float = Field(..., description="Fraction of sample lines matched (0.0-1.0)")
    matches: int = Field(..., description="Number of sample lines matched")
    total: int = Field(..., description="Number of sample lines")
    name: str = Field(..., description="Format display name")
    delimiter: str | None = Field(None, description="Detected delimiter (delimited hypothesis only)")
    average_fields: float | None = Field(None, description="Mean field count (delimited hypothesis only)")


class FormatMatch(BaseModel):
    """The accepted best match of a detection run."""

    id: str = Field(..., description="Format id")
    name: str = Field(..., description="Format display name")
    score: float = Field(..., description="Match score (0.0-1.0)")
    matches: int = Field(..., description="Number of sample lines matched")
    total: int = Field(..., description="Number of sample lines")
    delimiter: str | None = Field(None, description="Delimiter for delimited formats")


class DetectionResult(BaseModel):
    """Result of sampling a file and scoring every known format."""

    best_match: FormatMatch | None = Field(None, description="Best format above the confidence floor, if any")
    all_scores: dict[str, FormatScore] = Field(default_factory=dict, description="Scores in catalog order")
    sample_preview: list[str] = Field(default_factory=list, description="Up to 10 sampled lines")

    def to_cli(self, colorize: bool = False) -> str:
        """Format detection result for CLI output."""
        lines = []

        if self.best_match:
            match = self.best_match
            confidence = f'{round(match.score * 100)}%'
            if colorize:
                lines.append(f'{GREY}Detected:{RESET} {BOLD}{match.name}{RESET} ({match.id})')
                lines.append(f'{GREY}Confidence:{RESET} {GREEN}{confidence}{RESET} ({match.matches}/{match.total} lines)')
            else:
                lines.append(f'Detected: {match.name} ({match.id})')
                lines.append(f'Confidence: {confidence} ({match.matches}/{match.total} lines)')
            if match.delimiter is not None:
                lines.append(f'Delimiter: {match.delimiter!r}')
        else:
            lines.append(f'{RED}No format detected{RESET}' if colorize else 'No format detected')

        ranked = sorted(self.all_scores.items(), key=lambda item: item[1].score, reverse=True)
        ranked = [(format_id, s) for format_id, s in ranked if s.score > 0][:5]
        if ranked:
            lines.append('')
            lines.append('Top candidates:')
            for format_id, s in ranked:
                lines.append(f'  {format_id:<18} {s.score * 100:5.1f}%  {s.name}')

        if self.sample_preview:
            lines.append('')
            lines.append('Sample:')
            for sample in self.sample_preview:
                lines.append(f'  {GREY}{sample}{RESET}' if colorize else f'  {sample}')

        return '\n'.join(lines)


class Overview(BaseModel):
    total_lines: int = Field(..., description="All lines in the file, blank lines included")
    parsed_lines: int = Field(..., description="Lines parsed successfully")
    error_lines: int = Field(..., description="Lines that failed to parse")
    skipped_lines: int = Field(0, description="Blank lines")
    success_rate: int = Field(..., description="parsed_lines / total_lines as a rounded percentage")


class TimeRange(BaseModel):
    start: str = Field(..., description="Earliest record timestamp (ISO-8601)")
    end: str = Field(..., description="Latest record timestamp (ISO-8601)")
    duration_ms: int = Field(..., description="Milliseconds between start and end")


class TimeAnalysis(BaseModel):
    hourly_activity: dict[int, int] = Field(
        default_factory=dict, description="Record count per hour of day (UTC); records without timestamp excluded"
    )
    time_range: TimeRange | None = Field(None, description="Span of record timestamps")


class SourceStats(BaseModel):
    top_sources: list[tuple[str, int]] = Field(default_factory=list, description="Top 10 sources with counts")
    unique_count: int = Field(0, description="Number of distinct sources")


class NetworkStats(BaseModel):
    unique_ips: int = Field(0, description="Number of distinct IP addresses")
    sample_ips: list[str] = Field(default_factory=list, description="Up to 20 distinct IP addresses")


class HttpStats(BaseModel):
    status_codes: dict[int, int] = Field(default_factory=dict, description="Count per HTTP status code")
    total_requests: int = Field(0, description="Records carrying a status code")


class PatternSummary(BaseModel):
    template: str = Field(..., description="Generalized message template")
    frequency: int = Field(..., description="Number of matching records")
    severity: str = Field(..., description="error, warning or info")
    first_seen: str = Field(..., description="First occurrence (ISO-8601)")
    last_seen: str = Field(..., description="Last occurrence (ISO-8601)")
    examples: list[str] = Field(default_factory=list, description="Verbatim example messages")


class Anomaly(BaseModel):
    type: str = Field(..., description="high_error_rate, suspicious_ip_activity or frequent_error_pattern")
    severity: str = Field(..., description="error, warning or info")
    message: str = Field(..., description="Human-readable finding")
    count: int | None = Field(None, description="Records involved")
    ip: str | None = Field(None, description="Offending IP address")
    pattern: str | None = Field(None, description="Offending pattern template")
    frequency: int | None = Field(None, description="Pattern frequency")


class AnalysisSummary(BaseModel):
    """Aggregate statistics and anomalies for one parse result."""

    format_id: str = Field(..., description="Format used for parsing")
    format_name: str = Field(..., description="Format display name")
    overview: Overview
    log_levels: dict[str, int] = Field(default_factory=dict, description="Record count per level")
    time_analysis: TimeAnalysis = Field(default_factory=TimeAnalysis)
    sources: SourceStats = Field(default_factory=SourceStats)
    network: NetworkStats = Field(default_factory=NetworkStats)
    http_analysis: HttpStats = Field(default_factory=HttpStats)
    patterns: list[PatternSummary] = Field(default_factory=list, description="Top 20 patterns by frequency")
    anomalies: list[Anomaly] = Field(default_factory=list, description="Findings sorted by severity")

    def to_cli(self, colorize: bool = False) -> str:
        """Format analysis summary for CLI output."""
        severity_colors = {'error': RED, 'warning': YELLOW, 'info': GREEN}

        def paint(text: str, color: str) -> str:
            return f'{color}{text}{RESET}' if colorize else text

        lines = []
        o = self.overview
        lines.append(paint('Log Analysis', BOLD))
        lines.append(f'Format: {self.format_name} ({self.format_id})')
        lines.append(
            f'Lines: {o.total_lines:,} total, {o.parsed_lines:,} parsed, '
            f'{o.error_lines:,} errors, {o.skipped_lines:,} blank'
        )
        lines.append(f'Success rate: {paint(f"{o.success_rate}%", GREEN if o.success_rate >= 90 else YELLOW)}')

        if self.log_levels:
            lines.append('')
            lines.append(paint('Levels:', GREY))
            for level, count in sorted(self.log_levels.items(), key=lambda item: item[1], reverse=True):
                lines.append(f'  {level:<10} {count:,}')

        if self.time_analysis.time_range:
            tr = self.time_analysis.time_range
            lines.append('')
            lines.append(f'Time range: {tr.start} -> {tr.end}')

        if self.sources.top_sources:
            lines.append('')
            lines.append(paint(f'Top sources ({self.sources.unique_count} distinct):', GREY))
            for source, count in self.sources.top_sources:
                lines.append(f'  {source:<30} {count:,}')

        if self.network.unique_ips:
            lines.append('')
            lines.append(f'Distinct IPs: {self.network.unique_ips:,}')

        if self.http_analysis.status_codes:
            lines.append('')
            lines.append(paint(f'HTTP status codes ({self.http_analysis.total_requests:,} requests):', GREY))
            for status, count in sorted(self.http_analysis.status_codes.items()):
                lines.append(f'  {status} {count:,}')

        if self.patterns:
            lines.append('')
            lines.append(paint('Top patterns:', GREY))
            for p in self.patterns[:10]:
                lines.append(f'  {p.frequency:>7,}  {paint(f"[{p.severity}]", severity_colors.get(p.severity, GREY))} {p.template}')

        lines.append('')
        if self.anomalies:
            lines.append(paint(f'Anomalies ({len(self.anomalies)}):', BOLD))
            for a in self.anomalies:
                lines.append(f'  {paint(a.severity.upper(), severity_colors.get(a.severity, GREY))} {a.message}')
        else:
            lines.append('No anomalies detected')

        return '\n'.join(lines)
