"""Tests for the parse orchestrator."""

import json
import logging
import threading

import pytest

from logscope.detector import FormatDetectionError
from logscope.engine import LogParser
from logscope.formats import UnknownFormatError, get_format
from logscope.line_source import LineSource, UnsupportedCompressionError


def nginx_error(i: int, message: str = 'upstream timed out') -> str:
    return f'2023/10/25 10:{i // 60 % 60:02d}:{i % 60:02d} [error] 1234#0: *{i} {message}'


def json_line(i: int) -> str:
    return json.dumps({'timestamp': '2023-10-25T10:15:30Z', 'level': 'info', 'message': f'event {i}'})


def assert_stats_invariants(result):
    stats = result.stats
    assert stats.total_lines == stats.parsed_lines + stats.error_lines + stats.skipped_lines
    assert len(result.entries) == stats.parsed_lines + stats.error_lines
    numbers = [entry.line_number for entry in result.entries]
    assert numbers == sorted(set(numbers))


class TestScenarios:
    """End-to-end parse scenarios."""

    def test_one_malformed_line(self, write_log):
        lines = [nginx_error(0), 'this is not a log line', nginx_error(1), nginx_error(2), nginx_error(3)]
        result = LogParser().parse(write_log('error.log', lines))

        assert result.format_id == 'nginx_error'
        assert result.stats.total_lines == 5
        assert result.stats.parsed_lines == 4
        assert result.stats.error_lines == 1
        assert result.stats.skipped_lines == 0
        bad = result.entries[1]
        assert bad.line_number == 2
        assert bad.error
        assert bad.level == 'unknown'
        assert bad.message == 'this is not a log line'
        assert result.completed
        assert_stats_invariants(result)

    def test_all_blank_file(self, write_log):
        result = LogParser().parse(write_log('blank.log', ['', '', '']), format_id='syslog')
        assert result.stats.total_lines == 3
        assert result.stats.parsed_lines == 0
        assert result.stats.error_lines == 0
        assert result.stats.skipped_lines == 3
        assert result.entries == []
        assert result.patterns == []

    def test_repeated_message_single_pattern(self, write_log):
        lines = [
            f'2023-10-25 10:{i // 60:02d}:{i % 60:02d},123 - app.db - ERROR - '
            f'Connection to 10.0.{i % 7}.{i % 250} failed after {i % 5} retries'
            for i in range(150)
        ]
        parser = LogParser()
        result, summary = parser.parse_and_summarize(write_log('app.log', lines))

        assert result.format_id == 'python_logging'
        assert len(result.patterns) == 1
        pattern = result.patterns[0]
        assert pattern.frequency == 150
        assert pattern.template == 'Connection to IP_ADDRESS failed after NUMBER retries'
        assert pattern.severity == 'error'
        assert len(pattern.examples) == 3
        assert 'frequent_error_pattern' in [a.type for a in summary.anomalies]


class TestParse:
    """Tests for LogParser.parse()."""

    def test_stats_with_blank_and_bad_lines(self, write_log):
        lines = [json_line(0), '', 'not json', json_line(1), '   ', '[1, 2]', json_line(2)]
        result = LogParser().parse(write_log('app.jsonl', lines), format_id='json_logs')
        assert result.stats.total_lines == 7
        assert result.stats.parsed_lines == 3
        assert result.stats.error_lines == 2
        assert result.stats.skipped_lines == 2
        assert [e.line_number for e in result.entries] == [1, 3, 4, 6, 7]
        assert_stats_invariants(result)

    def test_deeply_nested_line_is_a_line_error(self, write_log):
        lines = [json_line(0), '[' * 100000, json_line(1)]
        result = LogParser().parse(write_log('nested.jsonl', lines), format_id='json_logs')
        assert result.stats.parsed_lines == 2
        assert result.stats.error_lines == 1
        assert result.entries[1].line_number == 2
        assert result.entries[1].error
        assert result.completed

    def test_unknown_format_id(self, write_log):
        path = write_log('app.log', [nginx_error(0)])
        with pytest.raises(UnknownFormatError):
            LogParser().parse(path, format_id='no_such_format')

    def test_detection_failure(self, write_log):
        path = write_log('prose.txt', ['hello', 'world', 'again'])
        with pytest.raises(FormatDetectionError) as exc_info:
            LogParser().parse(path)
        assert 'prose.txt' in str(exc_info.value)

    def test_detection_failure_on_blank_file(self, write_log):
        with pytest.raises(FormatDetectionError):
            LogParser().parse(write_log('blank.log', ['', '']))

    def test_unsupported_compression(self, tmp_path):
        path = tmp_path / 'app.log.xz'
        path.write_bytes(b'\xfd7zXZ\x00')
        with pytest.raises(UnsupportedCompressionError):
            LogParser().parse(str(path))
        with pytest.raises(UnsupportedCompressionError):
            LogParser().parse(str(path), format_id='syslog')

    def test_gzip_input(self, write_log):
        path = write_log('app.jsonl.gz', [json_line(i) for i in range(20)])
        result = LogParser().parse(path)
        assert result.format_id == 'json_logs'
        assert result.stats.parsed_lines == 20

    def test_detected_delimiter_is_used(self, write_log):
        lines = [f'2023-10-25;web{i};GET;200' for i in range(10)]
        result = LogParser().parse(write_log('data.txt', lines))
        assert result.format_id == 'custom_delimiter'
        assert result.delimiter == ';'
        assert result.entries[0].parsed_fields == {
            'field_1': '2023-10-25',
            'field_2': 'web0',
            'field_3': 'GET',
            'field_4': '200',
        }

    def test_forced_delimited_format_infers_delimiter(self, write_log):
        lines = [f'a|b|{i}|d' for i in range(10)]
        result = LogParser().parse(write_log('data.txt', lines), format_id='custom_delimiter')
        assert result.delimiter == '|'
        assert len(result.entries[0].parsed_fields) == 4

    def test_structured_result_has_no_delimiter(self, write_log):
        result = LogParser().parse(write_log('error.log', [nginx_error(0)]), format_id='nginx_error')
        assert result.delimiter is None
        assert result.format_name == 'Nginx Error Log'

    def test_to_dict(self, write_log):
        result = LogParser().parse(write_log('error.log', [nginx_error(0)]), format_id='nginx_error')
        data = result.to_dict(include_entries=False)
        assert 'entries' not in data
        assert data['stats']['parsed_lines'] == 1
        assert len(result.to_dict()['entries']) == 1


class TestProgress:
    """Tests for progress notification."""

    def test_every_1000_lines(self, write_log):
        path = write_log('app.jsonl', [json_line(i) for i in range(2500)])
        calls = []
        LogParser().parse(path, format_id='json_logs', on_progress=calls.append)
        assert [p.processed for p in calls] == [1000, 2000]
        assert calls[0].parsed == 1000
        assert calls[0].errors == 0

    def test_interval_from_env(self, write_log, monkeypatch):
        monkeypatch.setenv('LOGSCOPE_PROGRESS_INTERVAL', '10')
        path = write_log('app.jsonl', [json_line(i) for i in range(35)])
        calls = []
        LogParser().parse(path, format_id='json_logs', on_progress=calls.append)
        assert [p.processed for p in calls] == [10, 20, 30]

    def test_callback_errors_are_ignored(self, write_log, caplog):
        path = write_log('app.jsonl', [json_line(i) for i in range(30)])

        def explode(progress):
            raise RuntimeError('ui channel closed')

        with caplog.at_level(logging.WARNING, logger='logscope.engine'):
            result = LogParser(progress_interval=10).parse(path, format_id='json_logs', on_progress=explode)

        assert result.completed
        assert result.stats.parsed_lines == 30
        assert 'Progress callback failed' in caplog.text


class TestCancellation:
    """Closing the line source stops the run."""

    def test_close_from_callback(self, write_log):
        path = write_log('app.jsonl', [json_line(i) for i in range(50)])
        source = LineSource(path)

        def cancel(progress):
            source.close()

        result = LogParser(progress_interval=20).parse_source(source, get_format('json_logs'), on_progress=cancel)
        assert not result.completed
        assert result.stats.total_lines == 20
        assert len(result.entries) == 20
        assert_stats_invariants(result)

    def test_parse_source_accepts_plain_iterables(self):
        result = LogParser().parse_source([nginx_error(0), '', 'junk'], get_format('nginx_error'))
        assert result.completed
        assert result.stats.parsed_lines == 1
        assert result.stats.skipped_lines == 1
        assert result.stats.error_lines == 1


class TestIsolation:
    """Runs do not share state."""

    def test_concurrent_runs(self, write_log):
        paths = [
            write_log('a.log', [nginx_error(i) for i in range(300)]),
            write_log('b.jsonl', [json_line(i) for i in range(200)]),
        ]
        parser = LogParser()
        results = {}

        def run(path):
            results[path] = parser.parse(path)

        threads = [threading.Thread(target=run, args=(path,)) for path in paths]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results[paths[0]].stats.parsed_lines == 300
        assert results[paths[0]].format_id == 'nginx_error'
        assert results[paths[1]].stats.parsed_lines == 200
        assert results[paths[1]].format_id == 'json_logs'
