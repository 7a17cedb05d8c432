"""Key casing translation between the internal and wire conventions.

Payload keys are camelCase inside the client and snake_case on the wire.
Every mapping in a payload is rewritten, nested mappings included. Lists and
tuples are opaque: they are passed through as-is and their elements are not
walked.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

# Acronym runs ("HTTP" in "HTTPServer"), words, then digit runs.
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def _split_words(key: str) -> list[str]:
    return _WORD_RE.findall(key)


def camel_to_snake(key: str) -> str:
    """Convert a single key to snake_case (``sampleRate`` -> ``sample_rate``)."""
    words = _split_words(key)
    if not words:
        return key
    return "_".join(word.lower() for word in words)


def snake_to_camel(key: str) -> str:
    """Convert a single key to camelCase (``sample_rate`` -> ``sampleRate``)."""
    words = _split_words(key)
    if not words:
        return key
    head, *tail = words
    return head.lower() + "".join(word[:1].upper() + word[1:].lower() for word in tail)


def _transform_keys(value: Any, convert: Callable[[str], str]) -> Any:
    # Explicit stack: inbound payloads may be nested deeper than the
    # interpreter's recursion limit.
    if not isinstance(value, Mapping):
        return value
    root: dict[Any, Any] = {}
    pending: list[tuple[Mapping[Any, Any], dict[Any, Any]]] = [(value, root)]
    while pending:
        source, target = pending.pop()
        for key, item in source.items():
            new_key = convert(key) if isinstance(key, str) else key
            if isinstance(item, Mapping):
                child: dict[Any, Any] = {}
                target[new_key] = child
                pending.append((item, child))
            else:
                target[new_key] = item
    return root


def to_wire_case(value: Any) -> Any:
    """Return a copy of value with every mapping key in snake_case."""
    return _transform_keys(value, camel_to_snake)


def to_internal_case(value: Any) -> Any:
    """Return a copy of value with every mapping key in camelCase."""
    return _transform_keys(value, snake_to_camel)
