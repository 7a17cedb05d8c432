"""Payload schemas for the known Omnibus channel families.

Each channel family is identified by a literal channel-name prefix. The
catalogue is an ordered table of schema descriptors; extending the bus with a
new family means appending a descriptor, the dispatcher does not change.

Schemas describe the internal (camelCase) shape. Payloads are validated with
pydantic in strict mode and stay plain dicts after validation.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal, Union, get_args

from pydantic import ConfigDict, TypeAdapter, with_config
from typing_extensions import NotRequired, TypedDict, is_typeddict

DAQ_MESSAGE_FORMAT_VERSION = 3
CAN_MESSAGE_FORMAT_VERSION = 2

_STRICT = ConfigDict(strict=True)

MsgPrio = Literal["LOW", "MEDIUM", "HIGH", "HIGHEST"]
MSG_PRIORITIES: tuple[str, ...] = get_args(MsgPrio)


class PayloadKind(Enum):
    """Payload families carried on the bus."""

    DAQ = "daq"
    PARSLEY = "parsley"
    CAN_COMMAND = "can_command"
    PARSLEY_HEALTH = "parsley_health"
    RLCS = "rlcs"


@with_config(_STRICT)
class DAQMessage(TypedDict):
    """Batch of samples from a data-acquisition unit."""

    timestamp: float
    data: dict[str, list[float]]
    relativeTimestamps: list[float]
    sampleRate: int
    messageFormatVersion: Literal[3]


@with_config(_STRICT)
class ParsleyMessage(TypedDict):
    """Decoded CAN message forwarded by a Parsley server."""

    boardTypeId: str
    boardInstId: str
    msgPrio: MsgPrio
    msgType: str
    data: NotRequired[Any]  # parsley data payload, may be None or absent
    parsley: str
    messageFormatVersion: Literal[2]


@with_config(_STRICT)
class CANCommandMessage(TypedDict):
    """CAN command directed at a board."""

    boardTypeId: str
    boardInstId: str
    msgPrio: MsgPrio
    msgType: str
    canMsg: NotRequired[Any]
    parsley: str  # Parsley server instance ID
    messageFormatVersion: Literal[2]


@with_config(_STRICT)
class ParsleyHealthMessage(TypedDict):
    """Heartbeat from a Parsley server."""

    id: str
    health: str


# Legacy RLCSv3 sensor readings: sensor name -> reading.
RLCSMessage = dict[str, Union[float, str]]

AnyPayload = Union[
    DAQMessage, ParsleyMessage, CANCommandMessage, ParsleyHealthMessage, RLCSMessage
]


@dataclass(frozen=True)
class SchemaDescriptor:
    """Schema governing every channel that starts with ``prefix``.

    Attributes:
        prefix: Literal channel-name prefix (case-sensitive).
        kind: Payload family.
        adapter: pydantic adapter validating the camelCase payload.
    """

    prefix: str
    kind: PayloadKind
    adapter: TypeAdapter[Any]

    def validate(self, payload: Any) -> Any:
        """Validate an internal-case payload.

        Raises:
            pydantic.ValidationError: If the payload does not fit the schema.
        """
        return self.adapter.validate_python(payload)


def _descriptor(prefix: str, kind: PayloadKind, schema: Any) -> SchemaDescriptor:
    if is_typeddict(schema):
        adapter: TypeAdapter[Any] = TypeAdapter(schema)
    else:
        adapter = TypeAdapter(schema, config=_STRICT)
    return SchemaDescriptor(prefix=prefix, kind=kind, adapter=adapter)


def build_catalogue(
    descriptors: Iterable[SchemaDescriptor],
) -> tuple[SchemaDescriptor, ...]:
    """Freeze descriptors into a catalogue, rejecting duplicate prefixes."""
    catalogue = tuple(descriptors)
    seen: set[str] = set()
    for descriptor in catalogue:
        if not descriptor.prefix:
            raise ValueError("Catalogue prefixes must be non-empty")
        if descriptor.prefix in seen:
            raise ValueError(f"Duplicate catalogue prefix: {descriptor.prefix}")
        seen.add(descriptor.prefix)
    return catalogue


CATALOGUE: tuple[SchemaDescriptor, ...] = build_catalogue(
    (
        _descriptor("DAQ", PayloadKind.DAQ, DAQMessage),
        _descriptor("CAN/Parsley", PayloadKind.PARSLEY, ParsleyMessage),
        _descriptor("CAN/Commands", PayloadKind.CAN_COMMAND, CANCommandMessage),
        _descriptor("Parsley/Health", PayloadKind.PARSLEY_HEALTH, ParsleyHealthMessage),
        _descriptor("RLCS", PayloadKind.RLCS, RLCSMessage),
    )
)

SCHEMAS_BY_KIND: Mapping[PayloadKind, SchemaDescriptor] = MappingProxyType(
    {descriptor.kind: descriptor for descriptor in CATALOGUE}
)


def schema_for(kind: PayloadKind) -> SchemaDescriptor:
    """Return the default catalogue entry for a payload kind."""
    return SCHEMAS_BY_KIND[kind]
