"""Channel-name to schema resolution."""

from __future__ import annotations

from collections.abc import Iterable

from .schemas import CATALOGUE, PayloadKind, SchemaDescriptor, build_catalogue


class ChannelResolver:
    """Resolve channel names against a schema catalogue.

    A channel matches a catalogue entry when it starts with the entry's prefix
    (case-sensitive). When several prefixes match, the longest one wins.
    """

    def __init__(self, catalogue: Iterable[SchemaDescriptor] = CATALOGUE) -> None:
        self._catalogue = build_catalogue(catalogue)

    @property
    def catalogue(self) -> tuple[SchemaDescriptor, ...]:
        return self._catalogue

    def resolve(self, channel: str) -> SchemaDescriptor | None:
        """Return the schema for channel, or None when it is unroutable."""
        best_match: SchemaDescriptor | None = None
        for descriptor in self._catalogue:
            if not channel.startswith(descriptor.prefix):
                continue
            if best_match is None or len(descriptor.prefix) > len(best_match.prefix):
                best_match = descriptor
        return best_match

    def prefix_for(self, kind: PayloadKind) -> str:
        """Return the catalogue prefix for a payload kind."""
        for descriptor in self._catalogue:
            if descriptor.kind is kind:
                return descriptor.prefix
        raise KeyError(kind)


DEFAULT_RESOLVER = ChannelResolver()


def resolve_channel(channel: str) -> SchemaDescriptor | None:
    """Resolve channel against the default catalogue."""
    return DEFAULT_RESOLVER.resolve(channel)
