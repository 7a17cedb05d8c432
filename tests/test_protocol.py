"""Tests for message envelopes."""

from __future__ import annotations

import time

import pytest

from omnibus.errors import InvalidChannelError, MalformedMessageError
from omnibus.protocol import Message, RawMessage, build_message, now_ms, parse_event
from omnibus.schemas import PayloadKind

from conftest import daq_payload


class TestMessage:
    """Tests for the Message dataclass."""

    def test_message_is_frozen(self):
        """Test that messages are immutable."""
        msg = Message(channel="DAQ/a", timestamp=1, payload={})
        with pytest.raises(AttributeError):
            msg.channel = "DAQ/b"  # type: ignore[misc]


class TestBuildMessage:
    """Tests for build_message()."""

    def test_matching_channel(self):
        """Test a message is built when the channel fits the kind."""
        payload = daq_payload()
        msg = build_message(PayloadKind.DAQ, "DAQ/unit1", payload, timestamp=1000)
        assert msg == Message(channel="DAQ/unit1", timestamp=1000, payload=payload)

    def test_default_timestamp(self):
        """Test the timestamp defaults to the current epoch milliseconds."""
        before = int(time.time() * 1000)
        msg = build_message(PayloadKind.PARSLEY_HEALTH, "Parsley/Health/1", {})
        assert before <= msg.timestamp <= now_ms()

    def test_wrong_channel(self):
        """Test a DAQ payload cannot be built for a CAN channel."""
        with pytest.raises(InvalidChannelError) as exc_info:
            build_message(PayloadKind.DAQ, "CAN/Parsley/x", daq_payload())
        assert exc_info.value.expected_prefix == "DAQ"
        assert isinstance(exc_info.value, ValueError)


class TestParseEvent:
    """Tests for parse_event()."""

    def test_valid_event(self):
        """Test a well-formed event becomes a RawMessage."""
        event = parse_event("DAQ/a", (1000, {"sample_rate": 1}))
        assert event == RawMessage("DAQ/a", 1000, {"sample_rate": 1})

    def test_float_timestamp(self):
        """Test float timestamps are accepted."""
        assert parse_event("DAQ/a", (1000.5, {})).timestamp == 1000.5

    @pytest.mark.parametrize(
        ("channel", "args", "match"),
        [
            (42, (1000, {}), "Channel must be a string"),
            ("DAQ/a", (1000,), "Expected timestamp and payload"),
            ("DAQ/a", (1000, {}, "extra"), "Expected timestamp and payload"),
            ("DAQ/a", ("1000", {}), "Timestamp"),
            ("DAQ/a", (True, {}), "Timestamp"),
            ("DAQ/a", (1000, None), "Payload"),
            ("DAQ/a", (1000, "test"), "Payload"),
            ("DAQ/a", (1000, [1, 2]), "Payload"),
        ],
    )
    def test_malformed(self, channel, args, match):
        """Test primitive shape violations raise MalformedMessageError."""
        with pytest.raises(MalformedMessageError, match=match):
            parse_event(channel, args)
