"""Client configuration.

Configuration is plain data. It can be built in code or loaded from a YAML
file, either at the top level or under an ``omnibus:`` section::

    omnibus:
      allow_unsafe: false
      allow_expose_socket: false
      connect_timeout: 10
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import OmnibusConfigError


@dataclass(frozen=True)
class OmnibusConfig:
    """Options recognised by the Omnibus client.

    Attributes:
        allow_unsafe: Expose the unvalidated receive path.
        allow_expose_socket: Expose the raw transport handle.
        connect_timeout: Connection timeout in seconds.
        transports: Engine.IO transports to use, websocket only by default.
        namespace: Socket.IO namespace carrying the bus traffic.
    """

    allow_unsafe: bool = False
    allow_expose_socket: bool = False
    connect_timeout: float = 15.0
    transports: tuple[str, ...] = ("websocket",)
    namespace: str = "/"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OmnibusConfig:
        """Build a config from a mapping, rejecting unknown or mistyped keys.

        Raises:
            OmnibusConfigError: If a key is unknown or a value has the wrong type.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise OmnibusConfigError(f"Unknown config keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key in ("allow_unsafe", "allow_expose_socket"):
            if key in data:
                if not isinstance(data[key], bool):
                    raise OmnibusConfigError(f"{key} must be a boolean")
                values[key] = data[key]

        if "connect_timeout" in data:
            timeout = data["connect_timeout"]
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                raise OmnibusConfigError("connect_timeout must be a number")
            if timeout <= 0:
                raise OmnibusConfigError("connect_timeout must be positive")
            values["connect_timeout"] = float(timeout)

        if "transports" in data:
            transports = data["transports"]
            if isinstance(transports, str) or not isinstance(transports, (list, tuple)):
                raise OmnibusConfigError("transports must be a list of strings")
            if not transports or not all(isinstance(t, str) for t in transports):
                raise OmnibusConfigError("transports must be a list of strings")
            values["transports"] = tuple(transports)

        if "namespace" in data:
            namespace = data["namespace"]
            if not isinstance(namespace, str) or not namespace.startswith("/"):
                raise OmnibusConfigError("namespace must be a string starting with '/'")
            values["namespace"] = namespace

        return cls(**values)


def load_config(path: Path) -> OmnibusConfig:
    """Load client configuration from a YAML file.

    Raises:
        OmnibusConfigError: If the file is missing, unreadable or invalid.
    """
    if not path.exists():
        raise OmnibusConfigError(f"File not found: {path}")
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as err:
        raise OmnibusConfigError(f"Invalid YAML in {path}: {err}") from err

    if not isinstance(data, Mapping):
        raise OmnibusConfigError(f"Config in {path} must be a mapping")
    section = data.get("omnibus", data)
    if not isinstance(section, Mapping):
        raise OmnibusConfigError(f"'omnibus' section in {path} must be a mapping")
    return OmnibusConfig.from_mapping(section)
