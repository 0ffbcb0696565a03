import logging

import pytest

from twitch_chatfeed.errors import (
    ChatConnectionError,
    InternalError,
    MalformedTagWarning,
    NetworkError,
    ParseWarning,
    ParsingError,
    error_category,
    log_error,
)
from twitch_chatfeed.logging_config import error_aggregator


def test_chat_connection_error_is_builtin_connection_error():
    err = ChatConnectionError("gone", data={"host": "h"})
    assert isinstance(err, ConnectionError)
    assert isinstance(err, NetworkError)
    assert err.data == {"host": "h"}


def test_internal_error_copies_data():
    data = {"a": 1}
    err = InternalError("x", data=data)
    data["a"] = 2
    assert err.data == {"a": 1}
    assert InternalError("y").data == {}


def test_malformed_tag_warning_fields():
    w = MalformedTagWarning("emotes", "25:x", "bad offset")
    assert isinstance(w, ParsingError)
    assert w.tag == "emotes"
    assert w.value == "25:x"
    assert w.data["reason"] == "bad offset"
    assert "emotes" in str(w)


@pytest.mark.parametrize(
    "error,category",
    [
        (ChatConnectionError("x"), "network"),
        (OSError("x"), "network"),
        (TimeoutError(), "network"),
        (ParseWarning("x"), "parsing"),
        (InternalError("x"), "internal"),
        (ValueError("x"), "unknown"),
    ],
)
def test_error_category(error, category):
    assert error_category(error) == category


def test_log_error_merges_error_data(caplog):
    caplog.set_level(logging.ERROR)
    log_error(
        "Chat connection failed",
        ChatConnectionError("refused", data={"port": 6667}),
        context={"attempt": 3},
    )
    message = caplog.records[0].getMessage()
    assert "Chat connection failed: refused" in message
    assert "port=6667" in message
    assert "attempt=3" in message
    assert "network" in error_aggregator.get_error_summary()


def test_log_error_respects_level(caplog):
    caplog.set_level(logging.WARNING)
    log_error("Skipped", ValueError("bad"), level=logging.WARNING)
    assert caplog.records[0].levelno == logging.WARNING
