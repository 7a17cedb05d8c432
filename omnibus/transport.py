"""Socket.IO transport for the Omnibus bus.

The client layers only depend on the small ``Transport`` protocol below. The
production implementation wraps ``socketio.AsyncClient`` with the msgpack
parser over a websocket-only connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

import socketio
from socketio.exceptions import BadNamespaceError
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from .config import OmnibusConfig
from .errors import OmnibusConnectionError, OmnibusTimeout

_LOGGER = logging.getLogger(__name__)

AnyHandler = Callable[..., Any]


class Transport(Protocol):
    """Duplex event transport consumed by the Omnibus client."""

    @property
    def connected(self) -> bool: ...

    @property
    def sid(self) -> str | None: ...

    @property
    def raw(self) -> Any: ...

    async def connect(self) -> None: ...

    async def emit(self, channel: str, *args: Any) -> None: ...

    def on_any(self, handler: AnyHandler) -> None: ...

    def off_any(self, handler: AnyHandler) -> None: ...

    async def disconnect(self) -> None: ...


class SocketIOTransport:
    """Wrapper around socketio.AsyncClient for the Omnibus server.

    Wildcard handlers are kept in registration order behind a single
    catch-all registration so they can be removed again with ``off_any``.
    """

    def __init__(self, server_url: str, config: OmnibusConfig | None = None) -> None:
        self._server_url = server_url
        self._config = config or OmnibusConfig()
        self._client = socketio.AsyncClient(serializer="msgpack", reconnection=False)
        self._any_handlers: list[AnyHandler] = []
        self._client.on("*", self._dispatch_any, namespace=self._config.namespace)

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    @property
    def sid(self) -> str | None:
        return self._client.get_sid(self._config.namespace)

    @property
    def raw(self) -> socketio.AsyncClient:
        """The underlying socketio client."""
        return self._client

    async def connect(self) -> None:
        """Connect to the Omnibus server."""
        timeout = self._config.connect_timeout
        try:
            await asyncio.wait_for(
                self._client.connect(
                    self._server_url,
                    transports=list(self._config.transports),
                    namespaces=[self._config.namespace],
                    wait_timeout=timeout,
                ),
                timeout=timeout,
            )
        except TimeoutError as err:
            raise OmnibusTimeout("Omnibus connection timed out") from err
        except (SocketIOConnectionError, OSError) as err:
            raise OmnibusConnectionError("Omnibus connection failed") from err
        _LOGGER.info("[%s] Connected, sid=%s", self._server_url, self.sid)

    async def emit(self, channel: str, *args: Any) -> None:
        """Emit an event with positional arguments."""
        try:
            await self._client.emit(channel, args, namespace=self._config.namespace)
        except BadNamespaceError as err:
            raise OmnibusConnectionError("Omnibus transport is not connected") from err

    def on_any(self, handler: AnyHandler) -> None:
        """Register handler(channel, *args) for every inbound event."""
        self._any_handlers.append(handler)

    def off_any(self, handler: AnyHandler) -> None:
        """Remove a handler registered with ``on_any``."""
        try:
            self._any_handlers.remove(handler)
        except ValueError:
            _LOGGER.debug("[%s] Wildcard handler was not registered", self._server_url)

    async def disconnect(self) -> None:
        """Close the connection."""
        await self._client.disconnect()
        _LOGGER.info("[%s] Disconnected", self._server_url)

    def _dispatch_any(self, channel: Any, *args: Any) -> None:
        for handler in tuple(self._any_handlers):
            handler(channel, *args)
