"""
Event stream client — one WebSocket at ``/event``.

Connection lifecycle:

    CONNECTING -> AUTHENTICATING -> ONLINE -> DISCONNECTED
                        |              |
                        +-> ERRORED <--+

The login identity must be fetched before the connection counts as online;
if that fails the attempt ends in ERRORED and no event is dispatched.
Any failure ends in ERRORED; cancelling ``run()`` ends in DISCONNECTED.
Reconnecting is up to the caller: each ``run()`` is one attempt.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

import aiohttp
from pydantic import ValidationError

from milky_bridge.config import BotConfig
from milky_bridge.dispatcher import EventDispatcher
from milky_bridge.errors import ConnectionError, MilkyError
from milky_bridge.models.universal import HostEvent

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    ONLINE = "online"
    DISCONNECTED = "disconnected"
    ERRORED = "errored"


class WsClient:
    def __init__(
        self,
        config: BotConfig,
        dispatcher: EventDispatcher,
        authenticate: Callable[[], Awaitable[Any]],
        emit: Callable[[HostEvent], None],
    ):
        self._config = config
        self._dispatcher = dispatcher
        self._authenticate = authenticate
        self._emit = emit
        self._state = ConnectionState.DISCONNECTED
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Any = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def online(self) -> bool:
        return self._state is ConnectionState.ONLINE

    async def run(self) -> None:
        """Connect, authenticate, then dispatch events until the socket closes."""
        self._set_state(ConnectionState.CONNECTING)
        try:
            try:
                self._ws = await self._open()
            except aiohttp.ClientError as e:
                raise ConnectionError(f"Cannot open event stream: {e}") from e
            await self._bootstrap()
            await self._dispatcher.run(self._frames(self._ws), self._emit)
        except asyncio.CancelledError:
            self._set_state(ConnectionState.DISCONNECTED)
            raise
        except BaseException:
            self._set_state(ConnectionState.ERRORED)
            raise
        finally:
            await self.close()
        self._set_state(ConnectionState.DISCONNECTED)

    async def close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _open(self) -> Any:
        self._session = aiohttp.ClientSession(headers=self._config.headers)
        return await self._session.ws_connect(self._config.event_url)

    async def _bootstrap(self) -> None:
        self._set_state(ConnectionState.AUTHENTICATING)
        try:
            await self._authenticate()
        except (MilkyError, ValidationError) as e:
            logger.error("Login info request failed: %s", e)
            raise ConnectionError(f"Login failed: {e}") from e
        self._set_state(ConnectionState.ONLINE)

    async def _frames(self, ws: Any) -> AsyncIterator[str]:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.BINARY:
                yield msg.data.decode("utf-8")
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise ConnectionError(f"Event stream error: {ws.exception()}")
            else:
                break

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.info("Event stream %s -> %s", self._state.value, state.value)
        self._state = state
