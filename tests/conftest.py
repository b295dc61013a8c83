"""Pytest configuration and shared fixtures for logscope tests.

This module provides auto-use fixtures that ensure test isolation,
particularly for environment configuration and metrics.
"""

import gzip

import pytest

from logscope import detector, engine
from logscope.cli import prometheus as noop_prom


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Auto-use fixture that isolates configuration for each test.

    This fixture:
    1. Removes LOGSCOPE_* environment variables so defaults apply
    2. Restores the no-op metrics stub after tests that enable metrics
    """
    for key in ('LOGSCOPE_LOG_LEVEL', 'LOGSCOPE_SAMPLE_SIZE', 'LOGSCOPE_PROGRESS_INTERVAL'):
        monkeypatch.delenv(key, raising=False)

    monkeypatch.setattr(engine, 'prom', noop_prom)
    monkeypatch.setattr(detector, 'prom', noop_prom)


@pytest.fixture
def write_log(tmp_path):
    """Factory fixture writing lines to a log file under tmp_path.

    Returns:
        Callable (name, lines) -> str path. Names ending in .gz are gzip-compressed.
    """

    def _write(name: str, lines: list[str], newline: str = '\n') -> str:
        path = tmp_path / name
        text = newline.join(lines) + (newline if lines else '')
        if name.endswith('.gz'):
            with gzip.open(path, 'wt', encoding='utf-8') as f:
                f.write(text)
        else:
            path.write_bytes(text.encode('utf-8'))
        return str(path)

    return _write
