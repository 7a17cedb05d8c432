"""Tests for channel resolution."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter

from omnibus.channels import ChannelResolver, resolve_channel
from omnibus.schemas import PayloadKind, SchemaDescriptor


class TestResolveChannel:
    """Tests for resolve_channel() with the default catalogue."""

    @pytest.mark.parametrize(
        ("channel", "kind"),
        [
            ("DAQ/unit1", PayloadKind.DAQ),
            ("DAQ", PayloadKind.DAQ),
            ("CAN/Parsley/board1", PayloadKind.PARSLEY),
            ("CAN/Commands/ox_valve", PayloadKind.CAN_COMMAND),
            ("Parsley/Health/X", PayloadKind.PARSLEY_HEALTH),
            ("RLCS/v3", PayloadKind.RLCS),
        ],
    )
    def test_known_prefixes(self, channel: str, kind: PayloadKind):
        """Test each catalogue prefix routes to its schema."""
        descriptor = resolve_channel(channel)
        assert descriptor is not None
        assert descriptor.kind is kind

    @pytest.mark.parametrize(
        "channel", ["", "daq/unit1", "CAN/Unknown", "Test/AnyMessage", "XDAQ"]
    )
    def test_unknown(self, channel: str):
        """Test unmatched and wrongly-cased channels are unroutable."""
        assert resolve_channel(channel) is None

    def test_deterministic(self):
        """Test repeated resolution returns the same descriptor."""
        assert resolve_channel("DAQ/a") is resolve_channel("DAQ/a")


class TestChannelResolver:
    """Tests for ChannelResolver with custom catalogues."""

    def _resolver(self, *prefixes: tuple[str, PayloadKind]) -> ChannelResolver:
        adapter = TypeAdapter(dict)
        return ChannelResolver(
            SchemaDescriptor(prefix, kind, adapter) for prefix, kind in prefixes
        )

    def test_longest_prefix_wins(self):
        """Test the longer of two matching prefixes is chosen."""
        resolver = self._resolver(
            ("CAN", PayloadKind.CAN_COMMAND),
            ("CAN/Parsley", PayloadKind.PARSLEY),
        )
        assert resolver.resolve("CAN/Parsley/x").kind is PayloadKind.PARSLEY
        assert resolver.resolve("CAN/Other").kind is PayloadKind.CAN_COMMAND

    def test_longest_prefix_independent_of_order(self):
        """Test catalogue order does not change the winner."""
        resolver = self._resolver(
            ("CAN/Parsley", PayloadKind.PARSLEY),
            ("CAN", PayloadKind.CAN_COMMAND),
        )
        assert resolver.resolve("CAN/Parsley/x").kind is PayloadKind.PARSLEY

    def test_prefix_for(self):
        """Test prefix lookup by payload kind."""
        resolver = ChannelResolver()
        assert resolver.prefix_for(PayloadKind.CAN_COMMAND) == "CAN/Commands"

    def test_prefix_for_missing_kind(self):
        """Test prefix lookup fails for kinds absent from the catalogue."""
        resolver = self._resolver(("DAQ", PayloadKind.DAQ))
        with pytest.raises(KeyError):
            resolver.prefix_for(PayloadKind.RLCS)
