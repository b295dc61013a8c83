"""Tests for template generalization, tracking and severity classification."""

import pytest

from logscope.patterns import PatternTracker, classify_severity, generalize
from logscope.records import ParsedRecord


def record(message, timestamp=None, line_number=1):
    return ParsedRecord(line_number=line_number, raw_line=message or '', message=message, timestamp=timestamp)


class TestGeneralize:
    """Tests for generalize()."""

    def test_ip_address(self):
        assert generalize('Connection from 192.168.1.10 failed') == 'Connection from IP_ADDRESS failed'

    def test_idempotent(self):
        template = 'Connection from IP_ADDRESS failed'
        assert generalize(template) == template
        once = generalize('user 42 logged in at 2023-10-25T10:15:30Z from 10.0.0.1')
        assert generalize(once) == once

    def test_timestamp_before_numbers(self):
        assert generalize('started at 2023-10-25 10:15:30.123 ok') == 'started at TIMESTAMP ok'
        assert generalize('at 2023-10-25T10:15:30+02:00') == 'at TIMESTAMP'

    def test_uuid(self):
        assert generalize('request 123e4567-e89b-12d3-a456-426614174000 done') == 'request UUID done'

    def test_numbers(self):
        assert generalize('took 250 ms for 3 items') == 'took NUMBER ms for NUMBER items'
        assert generalize('worker42 exited') == 'workerNUMBER exited'

    def test_ip_before_number(self):
        assert generalize('10.0.0.1:8080') == 'IP_ADDRESS:NUMBER'

    def test_no_dynamic_tokens(self):
        assert generalize('Server started') == 'Server started'


class TestClassifySeverity:
    """Tests for classify_severity()."""

    @pytest.mark.parametrize(
        'template',
        ['Connection refused', 'Job FAILED', 'NullPointerException thrown', 'Permission denied', 'read timeout'],
    )
    def test_error_keywords(self, template):
        assert classify_severity(template) == 'error'

    @pytest.mark.parametrize('template', ['Deprecated API used', 'slow query', 'Retry scheduled', 'WARN low disk'])
    def test_warning_keywords(self, template):
        assert classify_severity(template) == 'warning'

    def test_error_wins_over_warning(self):
        assert classify_severity('Retry after timeout') == 'error'

    def test_info(self):
        assert classify_severity('User logged in') == 'info'


class TestPatternTracker:
    """Tests for PatternTracker."""

    def test_groups_by_template(self):
        tracker = PatternTracker()
        tracker.track(record('Connection from 10.0.0.1 failed', '2023-10-25T10:00:00.000Z'))
        tracker.track(record('Connection from 10.0.0.2 failed', '2023-10-25T11:00:00.000Z'))
        tracker.track(record('Server started', '2023-10-25T12:00:00.000Z'))

        patterns = {p.template: p for p in tracker.to_list()}
        assert len(patterns) == 2
        failed = patterns['Connection from IP_ADDRESS failed']
        assert failed.frequency == 2
        assert failed.first_seen == '2023-10-25T10:00:00.000Z'
        assert failed.last_seen == '2023-10-25T11:00:00.000Z'
        assert failed.severity == 'error'
        assert failed.examples == ['Connection from 10.0.0.1 failed', 'Connection from 10.0.0.2 failed']
        assert patterns['Server started'].severity == 'info'

    def test_empty_message_ignored(self):
        tracker = PatternTracker()
        tracker.track(record(None))
        tracker.track(record(''))
        assert len(tracker) == 0
        assert tracker.to_list() == []

    def test_example_caps(self):
        tracker = PatternTracker()
        for i in range(8):
            tracker.track(record(f'item {i} processed'))
        assert len(tracker.examples('item NUMBER processed')) == 5
        assert tracker.examples('item NUMBER processed')[-1] == 'item 4 processed'
        (pattern,) = tracker.to_list()
        assert pattern.frequency == 8
        assert pattern.examples == ['item 0 processed', 'item 1 processed', 'item 2 processed']

    def test_missing_timestamp_uses_now(self):
        tracker = PatternTracker()
        tracker.track(record('no time here'))
        (pattern,) = tracker.to_list()
        assert pattern.first_seen.endswith('Z')
        assert pattern.first_seen == pattern.last_seen

    def test_first_seen_order(self):
        tracker = PatternTracker()
        for message in ['b event', 'a event', 'b event']:
            tracker.track(record(message))
        assert [p.template for p in tracker.to_list()] == ['b event', 'a event']
