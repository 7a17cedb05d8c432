"""Pytest configuration and fixtures for omnibus tests."""

from __future__ import annotations

from typing import Any

import pytest

from omnibus.errors import OmnibusConnectionError
from omnibus.schemas import CAN_MESSAGE_FORMAT_VERSION, DAQ_MESSAGE_FORMAT_VERSION


class FakeTransport:
    """In-memory transport that echoes emitted events back to its listeners.

    Mirrors an Omnibus server that rebroadcasts every event to the sender.
    """

    def __init__(self, *, echo: bool = True) -> None:
        self.echo = echo
        self.connected = False
        self.sid: str | None = None
        self.emitted: list[tuple[str, tuple[Any, ...]]] = []
        self.connect_calls = 0
        self.disconnect_calls = 0
        self._handlers: list[Any] = []

    @property
    def raw(self) -> FakeTransport:
        return self

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    async def connect(self) -> None:
        self.connect_calls += 1
        self.connected = True
        self.sid = "fake-sid"

    async def emit(self, channel: str, *args: Any) -> None:
        if not self.connected:
            raise OmnibusConnectionError("Omnibus transport is not connected")
        self.emitted.append((channel, args))
        if self.echo:
            self.deliver(channel, *args)

    def on_any(self, handler: Any) -> None:
        self._handlers.append(handler)

    def off_any(self, handler: Any) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False
        self.sid = None

    def deliver(self, channel: Any, *args: Any) -> None:
        """Push an inbound event to every wildcard listener."""
        for handler in tuple(self._handlers):
            handler(channel, *args)


@pytest.fixture
def transport() -> FakeTransport:
    """Create a connected echoing fake transport."""
    fake = FakeTransport()
    fake.connected = True
    fake.sid = "fake-sid"
    return fake


def daq_payload(**overrides: Any) -> dict[str, Any]:
    """Build a valid internal-case DAQ payload."""
    payload: dict[str, Any] = {
        "timestamp": 1000,
        "data": {"sensor1": [1, 2, 3]},
        "relativeTimestamps": [0, 1, 2],
        "sampleRate": 1000,
        "messageFormatVersion": DAQ_MESSAGE_FORMAT_VERSION,
    }
    payload.update(overrides)
    return payload


def parsley_payload(**overrides: Any) -> dict[str, Any]:
    """Build a valid internal-case Parsley payload."""
    payload: dict[str, Any] = {
        "boardTypeId": "PRESSURE",
        "boardInstId": "ROCKET",
        "msgPrio": "HIGH",
        "msgType": "SENSOR_ANALOG",
        "data": {"sensorId": "SENSOR_PRESSURE_CC", "value": 512},
        "parsley": "parsley-1",
        "messageFormatVersion": CAN_MESSAGE_FORMAT_VERSION,
    }
    payload.update(overrides)
    return payload


def can_command_payload(**overrides: Any) -> dict[str, Any]:
    """Build a valid internal-case CAN command payload."""
    payload = parsley_payload()
    del payload["data"]
    payload["canMsg"] = {"actuatorId": "ACTUATOR_OX_INJECTOR", "state": "OPEN"}
    payload.update(overrides)
    return payload
