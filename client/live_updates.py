"""
Live Updates - admin room subscription over the realtime websocket

Features:
1. Joins the admin room on every (re)connection
2. Auto-reconnect with exponential backoff
3. Hands newRegistration pushes to a callback
4. Optional resync hook after a reconnect (pushes missed while offline are gone)
"""

import asyncio
import inspect
import json
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import websockets
from rich.console import Console

from client.config import ClientConfig

EventCallback = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]
ConnectedCallback = Callable[[bool], Union[None, Awaitable[None]]]


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class LiveUpdateListener:
    """
    Keeps one admin-room subscription alive.

    Usage:
        listener = LiveUpdateListener(config, on_event=dashboard.apply_live_event)
        await listener.run()
    """

    def __init__(
        self,
        config: ClientConfig,
        on_event: EventCallback,
        on_connected: Optional[ConnectedCallback] = None,
        console: Optional[Console] = None,
        connect: Callable[..., Any] = websockets.connect,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.on_event = on_event
        self.on_connected = on_connected
        self.console = console or Console(stderr=True)
        self._connect = connect
        self._sleep = sleep

        self.status = ConnectionStatus.DISCONNECTED
        self.retry_count = 0
        self.connections = 0
        self.base_delay = config.reconnect_base_delay
        self.max_delay = config.reconnect_max_delay
        self.max_retries = config.max_reconnect_attempts
        self._stopped = False

    def _get_backoff_delay(self) -> float:
        """Calculate exponential backoff delay"""
        delay = self.base_delay * (2 ** self.retry_count)
        return min(delay, self.max_delay)

    def stop(self) -> None:
        self._stopped = True

    async def run(self) -> None:
        """Listen until stop() is called or max_reconnect_attempts is exhausted"""
        while not self._stopped:
            try:
                async with self._connect(self.config.ws_url) as ws:
                    await self._session(ws)
            except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
                self.console.print(f"[yellow]Live updates disconnected: {e}[/yellow]")

            if self._stopped:
                break

            if self.max_retries and self.retry_count >= self.max_retries:
                self.status = ConnectionStatus.FAILED
                self.console.print("[red]Live updates unavailable: giving up after "
                                   f"{self.retry_count} attempts[/red]")
                return

            self.status = ConnectionStatus.RECONNECTING
            delay = self._get_backoff_delay()
            self.retry_count += 1
            self.console.print(f"[dim]Reconnecting in {delay:.0f}s (attempt {self.retry_count})...[/dim]")
            await self._sleep(delay)

        self.status = ConnectionStatus.DISCONNECTED

    async def _session(self, ws: Any) -> None:
        await ws.send(json.dumps({"event": "joinAdminRoom"}))

        async for raw in ws:
            if self._stopped:
                break
            try:
                message = json.loads(raw)
            except (TypeError, ValueError):
                continue
            if not isinstance(message, dict):
                continue

            event = message.get("event")
            if event == "joinedAdminRoom":
                reconnect = self.connections > 0
                self.connections += 1
                self.retry_count = 0
                self.status = ConnectionStatus.CONNECTED
                if self.on_connected is not None:
                    await _maybe_await(self.on_connected(reconnect))
            elif event == "newRegistration":
                await _maybe_await(self.on_event(message))
            elif event == "error":
                data = message.get("data") or {}
                self.console.print(f"[red]Server: {data.get('message', 'error')}[/red]")
