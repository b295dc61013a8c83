"""Tests for analysis summaries and anomaly rules."""

from logscope.anomalies import detect_anomalies
from logscope.records import ParsedRecord, ParseResult, ParseStats, PatternRecord
from logscope.summary import summarize


def make_records(count: int, level: str = 'info', **kwargs) -> list[ParsedRecord]:
    return [ParsedRecord(line_number=i + 1, raw_line='x', message='x', level=level, **kwargs) for i in range(count)]


def with_levels(total: int, errors: int) -> list[ParsedRecord]:
    return make_records(errors, level='error') + make_records(total - errors)


def ip_records(counts: dict[str, int]) -> list[ParsedRecord]:
    records = []
    for ip, count in counts.items():
        records.extend(make_records(count, ip_address=ip))
    return records


def make_result(entries, patterns=None, stats=None) -> ParseResult:
    if stats is None:
        stats = ParseStats(total_lines=len(entries), parsed_lines=len(entries))
    return ParseResult(
        format_id='json_logs', format_name='JSON Log Format', stats=stats, entries=entries, patterns=patterns or []
    )


class TestHighErrorRate:
    """Error share must exceed 10%."""

    def test_exactly_ten_percent_does_not_trigger(self):
        assert detect_anomalies(with_levels(100, 10), []) == []

    def test_just_over_ten_percent_triggers(self):
        (anomaly,) = detect_anomalies(with_levels(1000, 101), [])
        assert anomaly.type == 'high_error_rate'
        assert anomaly.severity == 'warning'
        assert anomaly.count == 101
        assert '10.1%' in anomaly.message

    def test_critical_and_emergency_count_as_errors(self):
        entries = make_records(1, level='critical') + make_records(1, level='emergency') + make_records(8)
        (anomaly,) = detect_anomalies(entries, [])
        assert anomaly.count == 2

    def test_unknown_level_is_not_an_error(self):
        assert detect_anomalies(make_records(5, level='unknown'), []) == []

    def test_empty(self):
        assert detect_anomalies([], []) == []


class TestSuspiciousIps:
    """An IP must exceed ten times the mean per-IP count."""

    def others(self):
        return {f'10.0.0.{i}': 1 for i in range(1, 20)}

    def test_exactly_ten_times_mean_does_not_trigger(self):
        # 19 + 19 requests over 20 IPs: mean 1.9, heavy IP at exactly 19
        counts = {'203.0.113.9': 19, **self.others()}
        assert detect_anomalies(ip_records(counts), []) == []

    def test_above_ten_times_mean_triggers(self):
        counts = {'203.0.113.9': 20, **self.others()}
        (anomaly,) = detect_anomalies(ip_records(counts), [])
        assert anomaly.type == 'suspicious_ip_activity'
        assert anomaly.severity == 'error'
        assert anomaly.ip == '203.0.113.9'
        assert anomaly.count == 20

    def test_single_ip_never_triggers(self):
        assert detect_anomalies(ip_records({'10.0.0.1': 500}), []) == []


class TestFrequentErrorPattern:
    """Error patterns seen more than 100 times."""

    def pattern(self, frequency, severity='error'):
        return PatternRecord(
            template='Connection to IP_ADDRESS failed',
            frequency=frequency,
            first_seen='2023-10-25T10:00:00.000Z',
            last_seen='2023-10-25T11:00:00.000Z',
            severity=severity,
        )

    def test_threshold(self):
        assert detect_anomalies([], [self.pattern(100)]) == []
        (anomaly,) = detect_anomalies([], [self.pattern(101)])
        assert anomaly.type == 'frequent_error_pattern'
        assert anomaly.severity == 'warning'
        assert anomaly.frequency == 101
        assert anomaly.pattern == 'Connection to IP_ADDRESS failed'

    def test_warning_patterns_ignored(self):
        assert detect_anomalies([], [self.pattern(500, severity='warning')]) == []


class TestAnomalyOrdering:
    """Anomalies are sorted error > warning > info."""

    def test_error_first(self):
        entries = with_levels(20, 15) + ip_records({'203.0.113.9': 30, **{f'10.0.0.{i}': 1 for i in range(1, 20)}})
        anomalies = detect_anomalies(entries, [])
        assert [a.severity for a in anomalies] == ['error', 'warning']
        assert anomalies[0].type == 'suspicious_ip_activity'


class TestSummarize:
    """Tests for summarize()."""

    def test_overview(self):
        entries = make_records(2) + [ParsedRecord(line_number=3, raw_line='bad', message='bad', level='unknown', error='x')]
        stats = ParseStats(total_lines=4, parsed_lines=2, error_lines=1, skipped_lines=1)
        summary = summarize(make_result(entries, stats=stats))
        assert summary.overview.total_lines == 4
        assert summary.overview.success_rate == 50
        assert summary.log_levels == {'info': 2, 'unknown': 1}

    def test_success_rate_rounds(self):
        stats = ParseStats(total_lines=3, parsed_lines=2, error_lines=1)
        assert summarize(make_result([], stats=stats)).overview.success_rate == 67

    def test_empty_result(self):
        summary = summarize(make_result([]))
        assert summary.overview.success_rate == 0
        assert summary.anomalies == []
        assert summary.time_analysis.time_range is None

    def test_hourly_activity_and_range(self):
        entries = [
            ParsedRecord(line_number=1, raw_line='a', message='a', timestamp='2023-10-25T09:59:00.000Z'),
            ParsedRecord(line_number=2, raw_line='b', message='b', timestamp='2023-10-25T10:00:00.000Z'),
            ParsedRecord(line_number=3, raw_line='c', message='c', timestamp='2023-10-25T10:30:00.000Z'),
            ParsedRecord(line_number=4, raw_line='d', message='d'),
        ]
        time_analysis = summarize(make_result(entries)).time_analysis
        assert time_analysis.hourly_activity == {9: 1, 10: 2}
        assert time_analysis.time_range.start == '2023-10-25T09:59:00.000Z'
        assert time_analysis.time_range.end == '2023-10-25T10:30:00.000Z'
        assert time_analysis.time_range.duration_ms == 31 * 60 * 1000

    def test_sources_top_ten(self):
        entries = []
        for i in range(12):
            entries.extend(make_records(i + 1, source=f'svc{i}'))
        sources = summarize(make_result(entries)).sources
        assert sources.unique_count == 12
        assert len(sources.top_sources) == 10
        assert sources.top_sources[0] == ('svc11', 12)

    def test_network_sample_capped(self):
        entries = ip_records({f'10.0.1.{i}': 1 for i in range(30)})
        network = summarize(make_result(entries)).network
        assert network.unique_ips == 30
        assert len(network.sample_ips) == 20
        assert network.sample_ips[0] == '10.0.1.0'

    def test_http_status_codes(self):
        entries = make_records(3, status_code=200) + make_records(1, status_code=404) + make_records(2)
        http = summarize(make_result(entries)).http_analysis
        assert http.status_codes == {200: 3, 404: 1}
        assert http.total_requests == 4

    def test_patterns_sorted_and_capped(self):
        patterns = [
            PatternRecord(template=f'event {i}', frequency=i, first_seen='t', last_seen='t') for i in range(1, 26)
        ]
        summary = summarize(make_result([], patterns=patterns))
        assert len(summary.patterns) == 20
        assert summary.patterns[0].frequency == 25
        assert summary.patterns[-1].frequency == 6

    def test_to_cli(self):
        summary = summarize(make_result(with_levels(10, 5)))
        output = summary.to_cli(colorize=False)
        assert 'Format: JSON Log Format (json_logs)' in output
        assert 'High error rate' in output
        assert '\033[' not in output
