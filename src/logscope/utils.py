"""Utility functions for logscope"""

import logging
import os


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_int_env(key: str, default: int = 0) -> int:
    """Get integer value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def get_sample_size() -> int:
    """Number of non-blank lines the format detector samples (LOGSCOPE_SAMPLE_SIZE)."""
    size = get_int_env('LOGSCOPE_SAMPLE_SIZE', 50)
    return size if size > 0 else 50


def get_progress_interval() -> int:
    """Lines between progress notifications (LOGSCOPE_PROGRESS_INTERVAL)."""
    interval = get_int_env('LOGSCOPE_PROGRESS_INTERVAL', 1000)
    return interval if interval > 0 else 1000


def setup_logging(default_level: str = 'WARNING') -> None:
    """
    Configure root logging from LOGSCOPE_LOG_LEVEL.

    Unknown level names fall back to default_level.
    """
    log_level_name = get_str_env('LOGSCOPE_LOG_LEVEL', default_level).upper()
    log_level = getattr(logging, log_level_name, None)
    if not isinstance(log_level, int):
        log_level = getattr(logging, default_level.upper(), logging.WARNING)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
