"""Error types for the Omnibus client."""

from __future__ import annotations


class OmnibusClientError(Exception):
    """Base error for Omnibus client failures."""


class OmnibusTimeout(OmnibusClientError):
    """Timeout while communicating with the Omnibus server."""


class OmnibusConnectionError(OmnibusClientError):
    """Connection to the Omnibus server failed or is not established."""


class OmnibusConfigError(OmnibusClientError):
    """Invalid client configuration."""


class InvalidChannelError(OmnibusClientError, ValueError):
    """Channel does not belong to the prefix of the payload kind."""

    def __init__(self, channel: str, expected_prefix: str) -> None:
        super().__init__(
            f"Channel {channel!r} must start with {expected_prefix!r}"
        )
        self.channel = channel
        self.expected_prefix = expected_prefix


class OmnibusMessageError(OmnibusClientError):
    """Inbound message could not be delivered.

    These never reach subscribers; the receiver logs and drops the message.
    """


class MalformedMessageError(OmnibusMessageError):
    """Event does not have the (channel, timestamp, payload) shape."""


class UnknownChannelError(OmnibusMessageError):
    """No catalogue prefix matches the channel."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"Unknown channel {channel!r}")
        self.channel = channel


class PayloadValidationError(OmnibusMessageError):
    """Payload does not satisfy the schema resolved from its channel."""

    def __init__(self, channel: str, cause: Exception) -> None:
        super().__init__(f"Malformed payload for channel {channel!r}: {cause}")
        self.channel = channel
        self.cause = cause
