"""
This module contains the exceptions raised by binding-tool.

Every error derives from BindingToolException so that callers (the CLI in particular)
can report failures uniformly. Errors always carry the path or URI involved.
"""

from typing import Optional


class BindingToolException(Exception):
    """
    Exceptions raised by binding-tool.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConfigurationError(BindingToolException):
    """Raised when a configuration value cannot be parsed or is out of range."""

    pass


class ManifestError(BindingToolException):
    """Base class for all buildpack.toml parse failures."""

    pass


class InvalidManifest(ManifestError):
    """The manifest is not valid TOML or its root is not a table."""

    pass


class MissingMetadata(ManifestError):
    pass


class InvalidMetadata(ManifestError):
    pass


class MissingDependencies(ManifestError):
    pass


class InvalidDependencies(ManifestError):
    pass


class InvalidDependency(ManifestError):
    """A single `[[metadata.dependencies]]` entry has the wrong shape."""

    pass


class AmbiguousChecksum(ManifestError):
    """A dependency declares both or neither of `sha256` and `checksum`."""

    pass


class UnsupportedAlgorithm(ManifestError):
    pass


class InvalidBuildpackIdentifier(ManifestError):
    pass


class MissingBindingType(BindingToolException):
    pass


class MalformedKeyValue(BindingToolException):
    pass


class InvalidBindingName(BindingToolException):
    """
    A binding name or key that does not name a single entry inside the bindings root.
    """


class ConfirmationDeclined(BindingToolException):
    pass


class SourceNotFound(BindingToolException):
    pass


class BindingIoError(BindingToolException):
    """
    Wraps an OSError raised while touching the bindings filesystem.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class InvalidDependencyUri(BindingToolException):
    """Raised when no file name can be derived from a dependency URI."""

    pass


class NetworkError(BindingToolException):
    """
    Wraps an HTTP failure, keeping the URI that was being fetched.
    """

    def __init__(self, message: str, uri: Optional[str] = None):
        super().__init__(message)
        self.uri = uri


class WorkerFailure(BindingToolException):
    """A download worker stopped because of an unexpected exception."""

    pass


class ChecksumMismatch(BindingToolException):
    pass
