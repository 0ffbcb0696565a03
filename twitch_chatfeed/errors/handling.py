from __future__ import annotations

import logging

from ..logging_config import log_structured_error
from .internal import InternalError, NetworkError, ParsingError


def error_category(error: BaseException) -> str:
    """Map an exception onto the category used for aggregation."""
    if isinstance(error, NetworkError | OSError | TimeoutError):
        return "network"
    if isinstance(error, ParsingError):
        return "parsing"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: Exception,
    context: dict | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging. The
            exception's own ``data`` mapping is merged underneath it.
        level: Logging level for the record.
    """
    merged: dict = {}
    if isinstance(error, InternalError):
        merged.update(error.data)
    if context:
        merged.update(context)
    log_structured_error(
        error_type=error_category(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=merged or None,
        level=level,
    )
