"""
Dependency models for dependency-mapping bindings.

This package provides the Pydantic data model for the artifacts declared in a
buildpack.toml and fetched into a `dependency-mapping` binding.
"""

from .dependencies import Dependency

__all__ = [
    "Dependency",
]
