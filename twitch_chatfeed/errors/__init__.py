from .handling import error_category, log_error
from .internal import (
    ChatConnectionError,
    InternalError,
    MalformedTagWarning,
    NetworkError,
    ParseWarning,
    ParsingError,
)

__all__ = [
    "ChatConnectionError",
    "InternalError",
    "MalformedTagWarning",
    "NetworkError",
    "ParseWarning",
    "ParsingError",
    "error_category",
    "log_error",
]
