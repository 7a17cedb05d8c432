"""Typed publish/subscribe client for the Omnibus message bus."""

__version__ = "0.1.0"

from .casing import camel_to_snake, snake_to_camel, to_internal_case, to_wire_case
from .channels import ChannelResolver, resolve_channel
from .client import OmnibusClient, communicator
from .config import OmnibusConfig, load_config
from .errors import (
    InvalidChannelError,
    MalformedMessageError,
    OmnibusClientError,
    OmnibusConfigError,
    OmnibusConnectionError,
    OmnibusMessageError,
    OmnibusTimeout,
    PayloadValidationError,
    UnknownChannelError,
)
from .protocol import Message, RawMessage, build_message, now_ms
from .receiver import Receiver, Subscription
from .schemas import (
    CAN_MESSAGE_FORMAT_VERSION,
    CATALOGUE,
    DAQ_MESSAGE_FORMAT_VERSION,
    AnyPayload,
    CANCommandMessage,
    DAQMessage,
    ParsleyHealthMessage,
    ParsleyMessage,
    PayloadKind,
    RLCSMessage,
    SchemaDescriptor,
)
from .sender import Sender
from .transport import SocketIOTransport, Transport

__all__ = [
    "CAN_MESSAGE_FORMAT_VERSION",
    "CATALOGUE",
    "DAQ_MESSAGE_FORMAT_VERSION",
    "AnyPayload",
    "CANCommandMessage",
    "ChannelResolver",
    "DAQMessage",
    "InvalidChannelError",
    "MalformedMessageError",
    "Message",
    "OmnibusClient",
    "OmnibusClientError",
    "OmnibusConfig",
    "OmnibusConfigError",
    "OmnibusConnectionError",
    "OmnibusMessageError",
    "OmnibusTimeout",
    "ParsleyHealthMessage",
    "ParsleyMessage",
    "PayloadKind",
    "PayloadValidationError",
    "RLCSMessage",
    "RawMessage",
    "Receiver",
    "SchemaDescriptor",
    "Sender",
    "SocketIOTransport",
    "Subscription",
    "Transport",
    "UnknownChannelError",
    "__version__",
    "build_message",
    "camel_to_snake",
    "communicator",
    "load_config",
    "now_ms",
    "resolve_channel",
    "snake_to_camel",
    "to_internal_case",
    "to_wire_case",
]
