"""Shared IRC data models (packaged)."""

from __future__ import annotations

from enum import Enum, auto


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    JOINING = auto()
    READY = auto()
