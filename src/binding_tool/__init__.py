"""
binding-tool generates service bindings: directories holding a `type` file and one
file per key, consumed by Cloud Native Buildpacks and their applications.

Besides plain key/value bindings it can build `dependency-mapping` bindings by
downloading every dependency declared in a buildpack.toml.
"""

from .binding_tool_config import BindingToolConfig
from .binding_tool_logger import BindingToolLogger
from .bindings import BindingStore, BindingWriter, ConfirmationPolicy
from .dependency_config import ManifestParser
from .dependency_downloader import DependencyFetcher
from .dependency_mapping import DependencyMapper
from .dependency_models import Dependency

__all__ = [
    "BindingStore",
    "BindingToolConfig",
    "BindingToolLogger",
    "BindingWriter",
    "ConfirmationPolicy",
    "Dependency",
    "DependencyFetcher",
    "DependencyMapper",
    "ManifestParser",
]
