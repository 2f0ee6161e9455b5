"""
Resolves binding-tool settings from the process environment.

This is the only module that reads environment variables. The resulting
BindingToolConfig is passed explicitly to everything else.
"""

import os
import pathlib
from typing import Mapping, Optional

from binding_tool.binding_tool_config import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_SIMULTANEOUS,
    DEFAULT_READ_TIMEOUT,
    BindingToolConfig,
)
from binding_tool.binding_tool_exceptions import ConfigurationError


class BindingToolSettings:
    """
    Provides the environment variable names and defaults used by binding-tool.
    """

    SERVICE_BINDING_ROOT = "SERVICE_BINDING_ROOT"
    MAX_SIMULTANEOUS = "BT_MAX_SIMULTANEOUS"
    CONNECT_TIMEOUT = "BT_CONN_TIMEOUT"
    READ_TIMEOUT = "BT_READ_TIMEOUT"
    REQUEST_TIMEOUT = "BT_REQ_TIMEOUT"
    PROXY = "PROXY"

    @staticmethod
    def get_bindings_root(
        environ: Optional[Mapping[str, str]] = None, cwd: Optional[str] = None
    ) -> pathlib.Path:
        """
        Returns SERVICE_BINDING_ROOT, or `./bindings` relative to the working directory
        """
        environ = os.environ if environ is None else environ
        root = environ.get(BindingToolSettings.SERVICE_BINDING_ROOT)
        if root:
            return pathlib.Path(root)
        return pathlib.Path(cwd or os.getcwd()) / "bindings"

    @staticmethod
    def from_env(
        environ: Optional[Mapping[str, str]] = None, cwd: Optional[str] = None
    ) -> BindingToolConfig:
        """
        Build a BindingToolConfig from environment variables.

        Raises:
            ConfigurationError: if a numeric variable cannot be parsed
        """
        environ = os.environ if environ is None else environ

        def number(name: str, default, cast):
            raw = environ.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return cast(raw.strip())
            except ValueError:
                raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None

        return BindingToolConfig(
            bindings_root=BindingToolSettings.get_bindings_root(environ, cwd),
            max_simultaneous=number(
                BindingToolSettings.MAX_SIMULTANEOUS, DEFAULT_MAX_SIMULTANEOUS, int
            ),
            connect_timeout=number(
                BindingToolSettings.CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT, float
            ),
            read_timeout=number(
                BindingToolSettings.READ_TIMEOUT, DEFAULT_READ_TIMEOUT, float
            ),
            request_timeout=number(BindingToolSettings.REQUEST_TIMEOUT, None, float),
            proxy=environ.get(BindingToolSettings.PROXY) or None,
        )
