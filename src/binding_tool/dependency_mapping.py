"""
Creates `dependency-mapping` bindings from a buildpack's declared dependencies.
"""

import logging
from typing import List, Optional

from binding_tool.binding_tool_config import BindingToolConfig
from binding_tool.binding_tool_exceptions import BindingIoError, BindingToolException
from binding_tool.binding_tool_logger import BindingToolLogger
from binding_tool.bindings import BindingStore, ConfirmationPolicy
from binding_tool.binding_tool_utils import HttpUtils
from binding_tool.dependency_config import ManifestParser
from binding_tool.dependency_config.config_manager import BINARIES_DIRECTORY
from binding_tool.dependency_downloader import DependencyFetcher
from binding_tool.dependency_models import Dependency

DEPENDENCY_MAPPING_TYPE = "dependency-mapping"


class DependencyMapper:
    """
    Ties the manifest parser, fetcher and binding store together:

    1. Parses buildpack.toml from disk or GitHub
    2. Creates `<root>/<name>/binaries` and fetches every artifact into it
    3. Only after the whole fetch succeeded, adds one `<digest>=file:///bindings/...`
       key per dependency
    """

    def __init__(
        self,
        config: BindingToolConfig,
        confirmation: ConfirmationPolicy,
        logger: Optional[BindingToolLogger] = None,
        session=None,
    ):
        self.config = config
        self.logger = logger or BindingToolLogger()
        self.session = session
        self.store = BindingStore(config.bindings_root, confirmation, self.logger)

    def run(
        self,
        toml_path: Optional[str] = None,
        buildpack: Optional[str] = None,
        binding_name: Optional[str] = None,
    ) -> List[Dependency]:
        """
        Build the binding. Exactly one of toml_path and buildpack must be given.

        Returns the dependencies that were mapped.
        """
        if (toml_path is None) == (buildpack is None):
            raise BindingToolException("exactly one of toml_path or buildpack is required")

        binding_name = binding_name or DEPENDENCY_MAPPING_TYPE
        owns_session = self.session is None
        session = self.session or HttpUtils.create_session(self.config)
        try:
            parser = ManifestParser(self.config, self.logger, session)
            if buildpack is not None:
                deps = parser.from_network(buildpack)
            else:
                deps = parser.from_disk(toml_path)

            binding_path = self.store.ensure_binding(DEPENDENCY_MAPPING_TYPE, binding_name)
            binaries = binding_path / BINARIES_DIRECTORY
            try:
                binaries.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise BindingIoError(f"cannot create {binaries}: {e}", path=str(binaries)) from e

            DependencyFetcher(self.config, self.logger, session).fetch(deps, binding_path)
        finally:
            if owns_session:
                session.close()

        self.store.add_all(
            DEPENDENCY_MAPPING_TYPE,
            binding_name,
            [d.binding_entry(binding_name) for d in deps],
        )
        self.logger.log(
            f"Mapped {len(deps)} dependencies into {binding_path}", logging.INFO
        )
        return deps
