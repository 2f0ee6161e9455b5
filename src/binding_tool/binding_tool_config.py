"""
Configuration parameters for binding-tool.
"""

import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Optional

from binding_tool.binding_tool_exceptions import ConfigurationError

DEFAULT_MAX_SIMULTANEOUS = 5
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 5.0


@dataclass
class BindingToolConfig:
    """
    Configuration consumed by the binding and dependency-mapping core.

    The values are resolved once at the process boundary (see BindingToolSettings)
    and passed in explicitly; nothing below the CLI reads the environment.
    """

    bindings_root: pathlib.Path
    max_simultaneous: int = DEFAULT_MAX_SIMULTANEOUS
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    request_timeout: Optional[float] = None
    proxy: Optional[str] = None
    verify_downloads: bool = False

    def __post_init__(self) -> None:
        self.bindings_root = pathlib.Path(self.bindings_root)
        if self.max_simultaneous < 1:
            raise ConfigurationError(
                f"max_simultaneous must be at least 1, got {self.max_simultaneous}"
            )
        for name in ("connect_timeout", "read_timeout", "request_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BindingToolConfig":
        """
        Create a BindingToolConfig instance from a dictionary
        """
        if "bindings_root" not in d:
            raise ConfigurationError("bindings_root is required")

        instance = cls(bindings_root=d["bindings_root"])
        try:
            if d.get("max_simultaneous") is not None:
                instance.max_simultaneous = int(d["max_simultaneous"])
            if d.get("connect_timeout") is not None:
                instance.connect_timeout = float(d["connect_timeout"])
            if d.get("read_timeout") is not None:
                instance.read_timeout = float(d["read_timeout"])
            if d.get("request_timeout") is not None:
                instance.request_timeout = float(d["request_timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid configuration value: {e}") from e
        instance.proxy = d.get("proxy") or None
        instance.verify_downloads = bool(d.get("verify_downloads", False))

        # re-run range checks on the coerced values
        instance.__post_init__()
        return instance

    def timeouts(self):
        """The (connect, read) tuple handed to requests."""
        return (self.connect_timeout, self.read_timeout)
