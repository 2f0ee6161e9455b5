"""
Dependency downloader.

This package handles:
1. Downloading dependency artifacts from their URIs with a bounded worker pool
2. Skipping artifacts whose on-disk checksum already matches
3. Updating dependency states and reporting the first failure
"""

from .downloader import DependencyFetcher

__all__ = ["DependencyFetcher"]
