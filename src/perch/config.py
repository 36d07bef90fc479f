"""Server configuration.

ServerConfig is a frozen dataclass: immutable after creation. ``start()``
accepts either a ServerConfig or a plain mapping; unknown mapping keys are
kept in ``extra`` and handed back unchanged once the listener is bound.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any

from perch.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Listener configuration. Immutable after creation.

    Only ``port`` is required::

        config = ServerConfig(port=8080)
        config = ServerConfig.from_mapping({"port": 8080, "host": "0.0.0.0", "name": "chat"})
    """

    port: int
    host: str = "127.0.0.1"

    # Passed through to uvicorn
    log_level: str = "info"
    backlog: int = 2048
    lifespan: str = "on"

    # Caller-defined fields, returned untouched by start()
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            msg = f"port must be an integer, got {self.port!r}"
            raise ConfigurationError(msg)
        if not 0 <= self.port <= 65535:
            msg = f"port out of range: {self.port}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ServerConfig":
        """Build a config from a plain mapping.

        Raises ``ConfigurationError`` if ``port`` is missing.
        """
        if "port" not in mapping:
            msg = "config is missing required option 'port'"
            raise ConfigurationError(msg)
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in mapping.items() if k in known}
        extra = dict(mapping.get("extra", {}))
        extra.update({k: v for k, v in mapping.items() if k not in known and k != "extra"})
        return cls(**kwargs, extra=extra)

    @classmethod
    def coerce(cls, config: "ServerConfig | Mapping[str, Any]") -> "ServerConfig":
        """Return *config* as a ServerConfig."""
        if isinstance(config, ServerConfig):
            return config
        return cls.from_mapping(config)

    def with_port(self, port: int) -> "ServerConfig":
        """Return a copy bound to a different port."""
        return replace(self, port=port)
