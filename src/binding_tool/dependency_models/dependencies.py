"""
Pydantic data model for the dependencies declared in a buildpack.toml.

Each `[[metadata.dependencies]]` entry is reduced to the two fields binding-tool
needs: where to download the artifact from and the SHA-256 it is expected to have.
"""

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from binding_tool.binding_tool_exceptions import InvalidDependencyUri


class Dependency(BaseModel):
    """
    A downloadable dependency.

    Immutable once parsed. The file name an artifact is stored under is derived
    lazily from the last path segment of the URI.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uri: str = Field(..., description="URI to download the artifact from")
    digest: str = Field(
        ..., alias="sha256", description="Hex-encoded SHA-256 of the artifact"
    )

    def filename(self) -> str:
        """
        Return the last path segment of the URI.

        Raises:
            InvalidDependencyUri: if the URI is relative, has no path segments
                (e.g. `data:` URIs) or ends with a slash
        """
        parts = urlsplit(self.uri)
        if not parts.scheme:
            raise InvalidDependencyUri(f"not an absolute uri {self.uri}")
        if not parts.netloc and not parts.path.startswith("/"):
            raise InvalidDependencyUri(f"no path segments for {self.uri}")

        name = parts.path.rsplit("/", 1)[-1]
        if not name:
            raise InvalidDependencyUri(f"no path for {self.uri}")
        return name

    def binding_entry(self, binding_name: str) -> str:
        """
        The `key=value` pair that maps this dependency's digest to its location
        inside a container that mounts the bindings root at `/bindings`.
        """
        return f"{self.digest}=file:///bindings/{binding_name}/binaries/{self.filename()}"
