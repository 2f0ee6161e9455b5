"""
Dependency configuration management.

This package handles:
1. Loading and parsing buildpack.toml manifests from disk or the network
2. Turning the parsed dependencies into download plans for a binding
3. Tracking the state of each dependency while it is fetched
"""

from .config_manager import (
    DependencyConfigManager,
    DependencyState,
    DownloadPlan,
    DownloadStatus,
)
from .manifest_parser import ManifestParser

__all__ = [
    "DependencyConfigManager",
    "DependencyState",
    "DownloadPlan",
    "DownloadStatus",
    "ManifestParser",
]
