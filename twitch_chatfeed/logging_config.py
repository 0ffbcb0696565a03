"""
Logging setup for the chat feed.

Installs a single colorlog handler on the root logger and keeps a per-category
tally of structured errors so a long-running feed can report, on shutdown,
whether network drops or unparsable lines dominated the session.
"""

import logging
import os
import sys
import threading
import time
from collections import defaultdict, deque
from typing import Any, TextIO

import colorlog

# Occurrences kept per category; older ones only survive in the counters.
ERROR_HISTORY_SIZE = 1000
RECENT_WINDOW_SECONDS = 3600

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}


def debug_enabled() -> bool:
    return os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")


class ErrorAggregator:
    """Thread-safe tally of structured errors by category."""

    def __init__(self, history_size: int = ERROR_HISTORY_SIZE):
        self.history_size = history_size
        self.lock = threading.Lock()
        self._reset()

    def _reset(self) -> None:
        self.errors: dict[str, deque[dict[str, Any]]] = defaultdict(
            lambda: deque(maxlen=self.history_size)
        )
        self.start_time = time.time()

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        with self.lock:
            self.errors[error_type].append(
                {"timestamp": time.time(), "message": message, "context": context or {}}
            )

    def get_error_summary(self) -> dict[str, Any]:
        """Per category: retained count, count inside the recent window, hourly rate."""
        with self.lock:
            now = time.time()
            hours = max((now - self.start_time) / 3600, 1)
            summary: dict[str, Any] = {}
            for error_type, occurrences in self.errors.items():
                summary[error_type] = {
                    "total_count": len(occurrences),
                    "recent_count": sum(
                        1
                        for e in occurrences
                        if now - e["timestamp"] < RECENT_WINDOW_SECONDS
                    ),
                    "rate_per_hour": len(occurrences) / hours,
                    "last_occurrence": occurrences[-1] if occurrences else None,
                }
            return summary

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("🚨 ERROR SUMMARY REPORT")
        for error_type, stats in sorted(summary.items()):
            logging.warning(
                f"  {error_type}: {stats['total_count']} total, "
                f"{stats['recent_count']} in last hour, "
                f"{stats['rate_per_hour']:.1f}/hour"
            )

    def clear(self) -> None:
        with self.lock:
            self._reset()


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log ``[CATEGORY] message | Exception: ... | Context: k=v`` and tally it.

    Args:
        error_type: Category the error is aggregated under ('network', 'parsing', ...).
        message: Descriptive error message.
        exception: The exception that occurred, if any.
        context: Extra key/value pairs appended to the line.
        level: Logging level of the record.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Routes every record through one colored stderr handler.

    The level comes from the ``DEBUG`` environment variable unless given
    explicitly.
    """

    def __init__(self, level: int | None = None, stream: TextIO | None = None):
        self.level = level
        self.stream = stream

    def build_formatter(self) -> colorlog.ColoredFormatter:
        return colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=LEVEL_COLORS,
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )

    def configure(self) -> None:
        level = self.level
        if level is None:
            level = logging.DEBUG if debug_enabled() else logging.INFO
        handler = logging.StreamHandler(self.stream or sys.stderr)
        handler.setFormatter(self.build_formatter())
        logging.basicConfig(level=level, handlers=[handler], force=True)
        # asyncio logs every slow callback at DEBUG
        logging.getLogger("asyncio").setLevel(logging.WARNING)
