"""
Parses buildpack.toml manifests into Dependency records.

A manifest can be read from a local file or fetched from GitHub given a buildpack
identifier of the form `owner/name` or `owner/name@ref`. The document must have the shape

    [[metadata.dependencies]]
    uri = "https://example.com/path/artifact-1.0.tgz"
    sha256 = "<hex>"            # or: checksum = "sha256:<hex>", never both

Any violation aborts the whole parse; no partial list is ever returned.
"""

import logging
import pathlib
from typing import Any, Dict, List, Optional, Union

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from binding_tool.binding_tool_config import BindingToolConfig
from binding_tool.binding_tool_exceptions import (
    AmbiguousChecksum,
    BindingIoError,
    InvalidBuildpackIdentifier,
    InvalidDependencies,
    InvalidDependency,
    InvalidManifest,
    InvalidMetadata,
    MissingDependencies,
    MissingMetadata,
    UnsupportedAlgorithm,
)
from binding_tool.binding_tool_logger import BindingToolLogger
from binding_tool.binding_tool_utils import HttpUtils
from binding_tool.dependency_models import Dependency

BUILDPACK_TOML_URL = "https://raw.githubusercontent.com/{owner}/{name}/{ref}/buildpack.toml"
DEFAULT_REF = "main"
SUPPORTED_ALGORITHM = "sha256"


class ManifestParser:
    """
    Loads buildpack.toml manifests from disk or the network and extracts their dependencies.
    """

    def __init__(
        self,
        config: BindingToolConfig,
        logger: Optional[BindingToolLogger] = None,
        session=None,
    ):
        """
        Args:
            config: Supplies the HTTP timeouts and proxy for remote manifests
            logger: Logger for progress messages
            session: requests-compatible session; one is created from config when omitted
        """
        self.config = config
        self.logger = logger or BindingToolLogger()
        self.session = session

    def from_disk(self, path: Union[str, pathlib.Path]) -> List[Dependency]:
        """
        Parse the manifest stored at path.

        Raises:
            BindingIoError: if the file cannot be read
            ManifestError: if the document is malformed
        """
        try:
            raw = pathlib.Path(path).read_bytes()
        except OSError as e:
            raise BindingIoError(f"cannot read manifest {path}: {e}", path=str(path)) from e

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidManifest(f"{path} is not valid UTF-8: {e}") from e

        deps = self.parse(text, source=str(path))
        self.logger.log(f"Read {len(deps)} dependencies from {path}", logging.INFO)
        return deps

    def from_network(self, buildpack: str) -> List[Dependency]:
        """
        Fetch and parse the buildpack.toml of the given buildpack from GitHub.

        Raises:
            InvalidBuildpackIdentifier: if buildpack is not `owner/name[@ref]`
            NetworkError: if the manifest cannot be fetched
            ManifestError: if the document is malformed
        """
        uri = self.buildpack_manifest_url(buildpack)
        session = self.session or HttpUtils.create_session(self.config)
        self.logger.log(f"Fetching buildpack.toml from {uri}", logging.INFO)

        try:
            text = HttpUtils.get_text(session, uri, self.config)
        finally:
            if self.session is None:
                session.close()
        deps = self.parse(text, source=uri)
        self.logger.log(f"Read {len(deps)} dependencies from {uri}", logging.INFO)
        return deps

    @staticmethod
    def buildpack_manifest_url(buildpack: str) -> str:
        """
        Map `owner/name[@ref]` to the raw GitHub URL of its buildpack.toml. `ref` defaults to `main`.
        """
        identifier, has_ref, ref = buildpack.partition("@")
        segments = identifier.split("/")
        if len(segments) != 2 or not all(segments) or (has_ref and not ref):
            raise InvalidBuildpackIdentifier(
                f"parse of [{buildpack}], should have format `buildpack/id@version`, "
                "`@version` is optional"
            )
        owner, name = segments
        return BUILDPACK_TOML_URL.format(owner=owner, name=name, ref=ref or DEFAULT_REF)

    @staticmethod
    def parse(text: str, source: str = "buildpack.toml") -> List[Dependency]:
        """
        Parse TOML text and extract its dependencies.
        """
        try:
            document = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise InvalidManifest(f"{source} is not valid TOML: {e}") from e
        return ManifestParser.transform(document)

    @staticmethod
    def transform(document: Any) -> List[Dependency]:
        """
        Extract `metadata.dependencies` from an already-parsed document, in manifest order.
        """
        if not isinstance(document, dict):
            raise InvalidManifest("buildpack.toml format is invalid")

        if "metadata" not in document:
            raise MissingMetadata("no metadata present in buildpack.toml")
        metadata = document["metadata"]
        if not isinstance(metadata, dict):
            raise InvalidMetadata("metadata should be a table")

        if "dependencies" not in metadata:
            raise MissingDependencies("no dependencies present")
        entries = metadata["dependencies"]
        if not isinstance(entries, list):
            raise InvalidDependencies("dependencies should be an array")

        return [ManifestParser._to_dependency(entry) for entry in entries]

    @staticmethod
    def _to_dependency(entry: Any) -> Dependency:
        if not isinstance(entry, dict):
            raise InvalidDependency("dependency should be a table")

        if "uri" not in entry:
            raise InvalidDependency("uri field is required")
        uri = entry["uri"]
        if not isinstance(uri, str):
            raise InvalidDependency("uri should be a string")

        has_sha256 = "sha256" in entry
        has_checksum = "checksum" in entry
        if has_sha256 == has_checksum:
            raise AmbiguousChecksum(f"sha256 or checksum field is required for {uri}")

        if has_sha256:
            return Dependency(uri=uri, digest=_string_field(entry, "sha256"))

        algorithm, separator, digest = _string_field(entry, "checksum").partition(":")
        if not separator or algorithm != SUPPORTED_ALGORITHM:
            raise UnsupportedAlgorithm(
                f"only sha256 algorithm is supported, found `{entry['checksum']}` for {uri}"
            )
        return Dependency(uri=uri, digest=digest)


def _string_field(entry: Dict[str, Any], name: str) -> str:
    value = entry[name]
    if not isinstance(value, str):
        raise InvalidDependency(f"{name} field should be a string")
    return value
