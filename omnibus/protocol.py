"""Message envelopes exchanged over the Omnibus bus.

Every unit on the wire is a ``(channel, timestamp, payload)`` triple. Timestamps
are Unix epoch milliseconds.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .channels import DEFAULT_RESOLVER, ChannelResolver
from .errors import InvalidChannelError, MalformedMessageError
from .schemas import PayloadKind

PayloadT = TypeVar("PayloadT")


@dataclass(frozen=True)
class Message(Generic[PayloadT]):
    """A channel message with an internal-case payload.

    Attributes:
        channel: Literal channel name the message travels on.
        timestamp: Unix epoch milliseconds.
        payload: Validated payload (camelCase keys).
    """

    channel: str
    timestamp: int | float
    payload: PayloadT


@dataclass(frozen=True)
class RawMessage:
    """An inbound message exactly as delivered by the transport."""

    channel: str
    timestamp: int | float
    payload: Any


def now_ms() -> int:
    """Return the current Unix time in milliseconds."""
    return int(time.time() * 1000)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid timestamp
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def build_message(
    kind: PayloadKind,
    channel: str,
    payload: PayloadT,
    *,
    timestamp: int | float | None = None,
    resolver: ChannelResolver = DEFAULT_RESOLVER,
) -> Message[PayloadT]:
    """Build an outbound message, checking the channel against the kind.

    Args:
        kind: Payload family of ``payload``.
        channel: Channel to send on; must start with the family's prefix.
        payload: Internal-case payload. It is not validated.
        timestamp: Optional epoch milliseconds override.
        resolver: Catalogue used to look up the family's prefix.

    Returns:
        Message ready for ``Sender.send``.

    Raises:
        InvalidChannelError: If channel does not start with the kind's prefix.
    """
    prefix = resolver.prefix_for(kind)
    if not channel.startswith(prefix):
        raise InvalidChannelError(channel, prefix)
    return Message(
        channel=channel,
        timestamp=timestamp if timestamp is not None else now_ms(),
        payload=payload,
    )


def parse_event(channel: Any, args: Sequence[Any]) -> RawMessage:
    """Check the primitive shape of an inbound transport event.

    Args:
        channel: Event name reported by the transport.
        args: Positional event arguments; expected ``(timestamp, payload)``.

    Returns:
        RawMessage carrying the untouched payload.

    Raises:
        MalformedMessageError: If the channel is not a string, the arguments are
            not a timestamp and a payload, the timestamp is not a number or the
            payload is not a mapping.
    """
    if not isinstance(channel, str):
        raise MalformedMessageError(
            f"Channel must be a string, got {type(channel).__name__}"
        )
    if len(args) != 2:
        raise MalformedMessageError(
            f"Expected timestamp and payload on {channel!r}, got {len(args)} arguments"
        )
    timestamp, payload = args
    if not _is_number(timestamp):
        raise MalformedMessageError(
            f"Timestamp on {channel!r} must be a number, got {type(timestamp).__name__}"
        )
    if not isinstance(payload, Mapping):
        raise MalformedMessageError(
            f"Payload on {channel!r} must be a mapping, got {type(payload).__name__}"
        )
    return RawMessage(channel=channel, timestamp=timestamp, payload=payload)
