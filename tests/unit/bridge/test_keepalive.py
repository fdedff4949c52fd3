"""Unit tests for keep-alive pings."""

import asyncio

import pytest

from godot_bridge.bridge.keepalive import DEFAULT_INITIAL_DELAY, DEFAULT_PING_INTERVAL, KeepAlive

pytestmark = [pytest.mark.bridge, pytest.mark.bridge_unit]


class TestKeepAlive:
    """Tests for the ping timer."""

    def test_defaults(self):
        keepalive = KeepAlive()
        assert keepalive.interval == DEFAULT_PING_INTERVAL == 20.0
        assert keepalive.initial_delay == DEFAULT_INITIAL_DELAY == 0.5
        assert keepalive.is_running is False

    @pytest.mark.asyncio
    async def test_first_ping_after_initial_delay(self, fake_ws):
        keepalive = KeepAlive(interval=10.0, initial_delay=0.05)
        keepalive.start(fake_ws)

        assert fake_ws.pings == 0
        await asyncio.sleep(0.1)
        assert fake_ws.pings == 1

        keepalive.stop()

    @pytest.mark.asyncio
    async def test_pings_repeat_at_interval(self, fake_ws):
        keepalive = KeepAlive(interval=0.05, initial_delay=0.01)
        keepalive.start(fake_ws)

        await asyncio.sleep(0.2)
        keepalive.stop()

        assert fake_ws.pings >= 3
        assert keepalive.ping_count == fake_ws.pings

    @pytest.mark.asyncio
    async def test_stops_when_socket_closed(self, fake_ws):
        keepalive = KeepAlive(interval=0.02, initial_delay=0.01)
        fake_ws.closed = True
        keepalive.start(fake_ws)

        await asyncio.sleep(0.05)

        assert fake_ws.pings == 0
        assert keepalive.is_running is False

    @pytest.mark.asyncio
    async def test_stops_when_ping_fails(self, fake_ws):
        async def failing_ping(message=b""):
            raise ConnectionResetError("Cannot write to closing transport")

        fake_ws.ping = failing_ping
        keepalive = KeepAlive(interval=0.02, initial_delay=0.01)
        keepalive.start(fake_ws)

        await asyncio.sleep(0.05)

        assert keepalive.is_running is False
        assert keepalive.ping_count == 0

    @pytest.mark.asyncio
    async def test_stop_cancels_timer(self, fake_ws):
        keepalive = KeepAlive(interval=0.02, initial_delay=0.05)
        keepalive.start(fake_ws)
        keepalive.stop()

        await asyncio.sleep(0.1)

        assert fake_ws.pings == 0
        assert keepalive.is_running is False

    @pytest.mark.asyncio
    async def test_start_replaces_running_timer(self, fake_ws):
        keepalive = KeepAlive(interval=10.0, initial_delay=0.02)
        keepalive.start(fake_ws)
        first = keepalive._task
        keepalive.start(fake_ws)

        await asyncio.sleep(0)
        assert first.cancelled() or first.done()

        await asyncio.sleep(0.05)
        assert fake_ws.pings == 1
        keepalive.stop()
