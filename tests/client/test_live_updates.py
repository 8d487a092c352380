"""
Tests for the live update listener's reconnect loop
"""
import json

import pytest
from rich.console import Console

from client.config import ClientConfig
from client.live_updates import ConnectionStatus, LiveUpdateListener


class FakeSocket:
    """Replays scripted frames, then ends the connection"""

    def __init__(self, frames):
        self.frames = [json.dumps(f) if isinstance(f, dict) else f for f in frames]
        self.sent = []

    async def send(self, data):
        self.sent.append(json.loads(data))

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            yield frame


class FakeConnect:
    """Stands in for websockets.connect; None in the script means refuse"""

    def __init__(self, script):
        self.script = list(script)
        self.sockets = []

    def __call__(self, url):
        return self

    async def __aenter__(self):
        frames = self.script.pop(0)
        if frames is None:
            raise OSError('connection refused')
        socket = FakeSocket(frames)
        self.sockets.append(socket)
        return socket

    async def __aexit__(self, *exc_info):
        return False


def make_listener(script, events, on_connected=None, max_attempts=0):
    config = ClientConfig(reconnect_base_delay=1.0, reconnect_max_delay=30.0,
                          max_reconnect_attempts=max_attempts)
    connect = FakeConnect(script)
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)
        if not connect.script:
            listener.stop()

    listener = LiveUpdateListener(
        config,
        on_event=events.append,
        on_connected=on_connected,
        console=Console(quiet=True),
        connect=connect,
        sleep=fake_sleep,
    )
    return listener, connect, delays


class TestLiveUpdateListener:

    @pytest.mark.asyncio
    async def test_joins_and_forwards_events(self):
        events = []
        push = {'event': 'newRegistration', 'data': {'id': 'r1'}}
        listener, connect, _ = make_listener([[{'event': 'joinedAdminRoom'}, push]], events)

        await listener.run()

        assert connect.sockets[0].sent == [{'event': 'joinAdminRoom'}]
        assert events == [push]

    @pytest.mark.asyncio
    async def test_backoff_doubles_and_caps(self):
        listener, _, delays = make_listener([None] * 7, [])

        await listener.run()

        assert delays == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0]

    @pytest.mark.asyncio
    async def test_backoff_resets_after_join_and_rejoins(self):
        connected = []
        script = [None, None, [{'event': 'joinedAdminRoom'}], None]
        listener, connect, delays = make_listener(script, [], on_connected=connected.append)

        await listener.run()

        # two failures, a successful join (reset), a drop, then one more failure
        assert delays == [1.0, 2.0, 1.0, 2.0]
        assert connected == [False]
        assert all(s.sent == [{'event': 'joinAdminRoom'}] for s in connect.sockets)

    @pytest.mark.asyncio
    async def test_reconnect_flagged(self):
        connected = []
        script = [[{'event': 'joinedAdminRoom'}], [{'event': 'joinedAdminRoom'}]]
        listener, _, _ = make_listener(script, [], on_connected=connected.append)

        await listener.run()

        assert connected == [False, True]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        listener, _, delays = make_listener([None] * 10, [], max_attempts=3)

        await listener.run()

        assert listener.status == ConnectionStatus.FAILED
        assert len(delays) == 3

    @pytest.mark.asyncio
    async def test_bad_frames_skipped(self):
        events = []
        listener, _, _ = make_listener([['not json', '[1, 2]', {'event': 'joinedAdminRoom'}]], events)

        await listener.run()

        assert events == []
        assert listener.connections == 1
