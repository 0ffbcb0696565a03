"""
Tests for IRC heartbeat and health snapshot functionality
"""

import time

import pytest
from freezegun import freeze_time

from twitch_chatfeed.irc.async_irc import AsyncTwitchChat
from twitch_chatfeed.irc.models import ConnectionState


class TestIRCHealthMonitoring:
    """Test heartbeat bookkeeping and health reasons"""

    @pytest.fixture
    def chat(self):
        """Transport that looks connected without a socket"""
        client = AsyncTwitchChat(server_activity_timeout=600)
        client.channel = "chan"
        client.connected = True
        client.running = True
        client.reader = object()  # type: ignore[assignment]
        client.writer = object()  # type: ignore[assignment]
        client.confirmed_channels.add("chan")
        return client

    def test_initial_state_is_unhealthy(self):
        snapshot = AsyncTwitchChat().get_health_snapshot()
        assert snapshot["healthy"] is False
        assert "not_connected" in snapshot["reasons"]
        assert "missing_streams" in snapshot["reasons"]
        assert snapshot["state"] == ConnectionState.DISCONNECTED.name
        assert snapshot["time_since_activity"] is None
        assert snapshot["time_since_ping"] is None

    def test_fresh_connection_is_healthy(self, chat):
        chat.heartbeat.record_activity()
        assert chat.is_healthy() is True
        assert chat.get_health_snapshot()["reasons"] == []

    def test_unconfirmed_join_is_reported(self, chat):
        chat.confirmed_channels.clear()
        chat.heartbeat.record_activity()
        assert "join_unconfirmed" in chat.get_health_snapshot()["reasons"]

    def test_idle_and_stale_reasons(self, chat):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            chat.heartbeat.record_activity()
            frozen.tick(400)
            reasons = chat.get_health_snapshot()["reasons"]
            assert "idle_warning" in reasons
            assert "stale_activity" not in reasons
            frozen.tick(300)
            reasons = chat.get_health_snapshot()["reasons"]
            assert "stale_activity" in reasons
            assert chat.is_healthy() is False

    def test_ping_timeout_reason(self, chat):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            chat.heartbeat.record_ping()
            frozen.tick(chat.expected_ping_interval * 1.5 + 1)
            chat.heartbeat.record_activity()
            assert chat.get_health_snapshot()["reasons"] == ["ping_timeout"]

    def test_record_ping_counts_as_activity(self, chat):
        chat.heartbeat.record_ping()
        assert chat.last_ping_from_server == chat.last_server_activity
        assert chat.get_health_snapshot()["time_since_ping"] is not None

    def test_snapshot_includes_event_counters(self, chat):
        chat.subscribe(lambda m: None)
        snapshot = chat.get_health_snapshot()
        assert snapshot["subscribers"] == 1
        assert snapshot["events_published"] == 0
        assert snapshot["channel"] == "chan"


class TestHeartbeat:
    def test_not_stale_before_any_activity(self):
        chat = AsyncTwitchChat(server_activity_timeout=1)
        assert chat.heartbeat.seconds_since_activity() == 0.0
        assert chat.heartbeat.is_connection_stale() is False

    def test_stale_after_timeout(self):
        chat = AsyncTwitchChat(server_activity_timeout=10)
        with freeze_time("2026-01-01 00:00:00") as frozen:
            chat.heartbeat.record_activity()
            frozen.tick(5)
            assert chat.heartbeat.is_connection_stale() is False
            frozen.tick(6)
            assert chat.heartbeat.is_connection_stale() is True

    def test_record_activity_uses_wall_clock(self):
        chat = AsyncTwitchChat()
        before = time.time()
        chat.heartbeat.record_activity()
        assert chat.last_server_activity >= before
