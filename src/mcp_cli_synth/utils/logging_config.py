"""Logging configuration for the clisynth MCP server.

Provides configurable logging with:
- File-based logging with rotation
- Console output on stderr (stdout carries the MCP stdio transport)
- Timing helpers that feed a per-operation statistics table

Environment Variables:
    CLISYNTH_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    CLISYNTH_LOG_FILE: Path to log file (default: ~/.clisynth/clisynth.log)
    CLISYNTH_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    CLISYNTH_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from mcp_cli_synth.utils.logging_config import setup_logging, timed_section_sync

    setup_logging()  # Call once at startup

    with timed_section_sync("compile_all", device_id="core-sw1"):
        ...
"""
import functools
import inspect
import logging
import os
import sys
import time
from contextlib import asynccontextmanager, contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("clisynth.perf")
main_logger = logging.getLogger("clisynth")


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("CLISYNTH_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".clisynth" / "clisynth.log"
    return Path(os.environ.get("CLISYNTH_LOG_FILE", str(default_path)))


def _rotating(path: Path, formatter: logging.Formatter) -> RotatingFileHandler:
    max_size_mb = int(os.environ.get("CLISYNTH_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("CLISYNTH_LOG_BACKUPS", "5"))
    handler = RotatingFileHandler(
        path,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler on stderr (respects CLISYNTH_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance log in a sibling file for timing analysis
    """
    log_level = get_log_level()
    log_file = get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-32s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)
    file_handler = _rotating(log_file, main_format)
    perf_log_file = log_file.parent / "clisynth-perf.log"

    # Package modules log under mcp_cli_synth.*, helpers under clisynth.*
    for name in ("clisynth", "mcp_cli_synth"):
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
        logger.addHandler(console_handler)
        logger.addHandler(file_handler)

    perf_logger.setLevel(logging.DEBUG)
    perf_logger.propagate = False
    perf_logger.addHandler(_rotating(perf_log_file, perf_format))
    perf_logger.addHandler(console_handler)

    main_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def _report(operation: str, device_id: Optional[str], start: float, error: Optional[Exception] = None, **extra) -> None:
    elapsed = (time.perf_counter() - start) * 1000  # ms
    global_stats.record(operation, elapsed)
    msg = f"{operation:20s} | {device_id or 'N/A':15s} | {elapsed:8.2f}ms | "
    msg += f"FAIL: {error}" if error else "OK"
    if extra:
        msg += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())
    if error:
        perf_logger.warning(msg)
    else:
        perf_logger.info(msg)


def timed(operation: str, device_id: Optional[str] = None):
    """Decorator to log execution time of sync/async functions.

    Args:
        operation: Name of the operation (e.g., "connect", "send", "compile")
        device_id: Optional device identifier (can also be inferred from self.device_id)

    Usage:
        @timed("connect")
        async def connect(self):
            ...
    """
    def decorator(func: Callable) -> Callable:
        def resolve_device(args) -> Optional[str]:
            if device_id is None and args and hasattr(args[0], "device_id"):
                return args[0].device_id
            return device_id

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            dev_id = resolve_device(args)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _report(operation, dev_id, start, e)
                raise
            _report(operation, dev_id, start)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            dev_id = resolve_device(args)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(operation, dev_id, start, e)
                raise
            _report(operation, dev_id, start)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, device_id: Optional[str] = None, **extra):
    """Async context manager for timing code sections.

    Usage:
        async with timed_section("tool_call", tool="compile_all"):
            ...
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, device_id, start, e, **extra)
        raise
    _report(operation, device_id, start, **extra)


@contextmanager
def timed_section_sync(operation: str, device_id: Optional[str] = None, **extra):
    """Sync context manager for timing code sections."""
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, device_id, start, e, **extra)
        raise
    _report(operation, device_id, start, **extra)


class PerfStats:
    """Collect and report timing statistics per operation.

    Usage:
        stats = PerfStats()
        stats.record("compile_all", 12.5)
        print(stats.summary())
    """

    def __init__(self):
        self._data: dict[str, list[float]] = {}

    def record(self, operation: str, duration_ms: float) -> None:
        """Record a timing measurement."""
        self._data.setdefault(operation, []).append(duration_ms)

    def count(self, operation: str) -> int:
        return len(self._data.get(operation, ()))

    def summary(self) -> str:
        """Generate summary statistics."""
        lines = ["Performance Summary", "=" * 60]
        for op, times in sorted(self._data.items()):
            if not times:
                continue
            avg = sum(times) / len(times)
            lines.append(
                f"{op:20s} | count={len(times):4d} | "
                f"avg={avg:8.2f}ms | min={min(times):8.2f}ms | max={max(times):8.2f}ms"
            )
        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all recorded data."""
        self._data.clear()


# Global stats instance, fed by every timing helper above
global_stats = PerfStats()
