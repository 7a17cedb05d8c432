"""Omnibus client facade.

Ties a transport to a sender and a receiver and owns the connection lifecycle.

Usage:
    async with OmnibusClient("http://localhost:3000") as client:
        client.receiver.subscribe("DAQ", on_daq)
        await client.sender.send(build_message(PayloadKind.DAQ, "DAQ/unit1", payload))
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from types import TracebackType
from typing import Any

from .config import OmnibusConfig
from .errors import OmnibusConfigError
from .receiver import RawCallback, Receiver, Subscription
from .sender import Sender
from .transport import SocketIOTransport, Transport

_LOGGER = logging.getLogger(__name__)


class OmnibusClient:
    """Connection to one Omnibus server.

    Optional capabilities are fixed at construction: ``socket`` is the raw
    transport handle when ``allow_expose_socket`` is set and
    ``unsafe_receive_generic_message`` is the unvalidated receive function
    when ``allow_unsafe`` is set. Both are None otherwise.
    """

    def __init__(
        self,
        server_url: str,
        config: OmnibusConfig | None = None,
        *,
        transport: Transport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            server_url: Omnibus server address, e.g. ``http://localhost:3000``.
            config: Client options; defaults to ``OmnibusConfig()``.
            transport: Transport to use instead of Socket.IO (for tests and
                embedding).

        Raises:
            OmnibusConfigError: If the address or config is invalid.
        """
        if not isinstance(server_url, str) or not server_url:
            raise OmnibusConfigError("server_url must be a non-empty string")
        if config is None:
            config = OmnibusConfig()
        elif not isinstance(config, OmnibusConfig):
            raise OmnibusConfigError("config must be an OmnibusConfig")

        self.server_url = server_url
        self.config = config
        self._transport: Transport = (
            transport if transport is not None else SocketIOTransport(server_url, config)
        )
        self._disconnected = False

        self.sender = Sender(self._transport)
        self.receiver = Receiver(
            self._transport, allow_unsafe=config.allow_unsafe, name=server_url
        )
        self.unsafe_receive_generic_message: (
            Callable[[RawCallback], Subscription] | None
        ) = self.receiver.receive_raw if config.allow_unsafe else None
        self.socket: Any | None = (
            self._transport.raw if config.allow_expose_socket else None
        )

    @property
    def connected(self) -> bool:
        return not self._disconnected and self._transport.connected

    @property
    def sid(self) -> str | None:
        return self._transport.sid

    async def connect(self) -> None:
        """Open the transport connection."""
        if self._disconnected:
            raise OmnibusConfigError("Client was disconnected; create a new client")
        await self._transport.connect()

    async def disconnect(self) -> None:
        """Stop delivering messages and close the connection.

        The client does not reconnect; calling this again does nothing.
        """
        if self._disconnected:
            _LOGGER.debug("[%s] Already disconnected", self.server_url)
            return
        self._disconnected = True
        self.receiver.close()
        await self._transport.disconnect()

    async def __aenter__(self) -> OmnibusClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()


async def communicator(
    server_url: str,
    *,
    allow_unsafe: bool = False,
    allow_expose_socket: bool = False,
    config: OmnibusConfig | None = None,
    transport: Transport | None = None,
) -> OmnibusClient:
    """Create and connect an Omnibus client.

    Either flag enables its capability even when ``config`` leaves it off.
    """
    base = config or OmnibusConfig()
    if not isinstance(base, OmnibusConfig):
        raise OmnibusConfigError("config must be an OmnibusConfig")
    resolved = replace(
        base,
        allow_unsafe=allow_unsafe or base.allow_unsafe,
        allow_expose_socket=allow_expose_socket or base.allow_expose_socket,
    )
    client = OmnibusClient(server_url, resolved, transport=transport)
    await client.connect()
    return client
