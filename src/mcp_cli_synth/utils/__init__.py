"""Logging and retry helpers."""
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    timed_section_sync,
    perf_logger,
    PerfStats,
    global_stats,
)
from .retry import RETRYABLE_EXCEPTIONS, with_retry

__all__ = [
    "RETRYABLE_EXCEPTIONS",
    "with_retry",
    "setup_logging",
    "timed",
    "timed_section",
    "timed_section_sync",
    "perf_logger",
    "PerfStats",
    "global_stats",
]
