"""Outbound sending of bus messages."""

from __future__ import annotations

import logging
from typing import Any

from .casing import to_wire_case
from .protocol import Message
from .transport import Transport

_LOGGER = logging.getLogger(__name__)


class Sender:
    """Emit messages on the bus in wire casing.

    The payload is trusted: build messages with ``build_message`` so the
    channel matches the payload kind. Nothing is validated, buffered or
    retried here.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def send(self, message: Message[Any]) -> None:
        """Emit ``(channel, timestamp, payload)`` once on the transport.

        Raises:
            OmnibusConnectionError: If the transport is not connected.
        """
        await self._transport.emit(
            message.channel,
            message.timestamp,
            to_wire_case(message.payload),
        )
        _LOGGER.debug("Sent message on %s", message.channel)
