"""
Adds and deletes bindings under a bindings root.
"""

import logging
import os
import pathlib
import shutil
from typing import Iterable, List, Optional, Union

from binding_tool.binding_tool_exceptions import (
    BindingIoError,
    ConfirmationDeclined,
    InvalidBindingName,
    MissingBindingType,
)
from binding_tool.binding_tool_logger import BindingToolLogger
from binding_tool.bindings.confirmation import ConfirmationPolicy
from binding_tool.bindings.writer import (
    TYPE_FILE,
    BindingWriter,
    is_valid_binding_name,
    is_valid_key,
)

CA_CERTIFICATES_TYPE = "ca-certificates"
DELETE_PROMPT = "Are you sure you want to delete {path}?"


class BindingStore:
    """
    Orchestrates binding changes under `bindings_root`.

    Layout:

        <bindings_root>/<binding_name>/type
        <bindings_root>/<binding_name>/<key>
    """

    def __init__(
        self,
        bindings_root: Union[str, pathlib.Path],
        confirmation: ConfirmationPolicy,
        logger: Optional[BindingToolLogger] = None,
    ):
        self.bindings_root = pathlib.Path(bindings_root)
        self.confirmation = confirmation
        self.logger = logger or BindingToolLogger()
        self.writer = BindingWriter(confirmation, self.logger)

    def binding_path(self, binding_name: str) -> pathlib.Path:
        """
        Raises:
            InvalidBindingName: if binding_name is empty, `.`, `..` or contains `/`
        """
        if not is_valid_binding_name(binding_name):
            raise InvalidBindingName(f"invalid binding name `{binding_name}`")
        return self.bindings_root / binding_name

    def ensure_binding(self, binding_type: str, binding_name: Optional[str] = None) -> pathlib.Path:
        """
        Create the binding directory if needed and write its `type` marker.
        """
        binding_path = self.binding_path(binding_name or binding_type)
        try:
            binding_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BindingIoError(f"cannot create {binding_path}: {e}", path=str(binding_path)) from e
        self.writer.write_type(binding_path, binding_type)
        return binding_path

    def add_all(
        self,
        binding_type: Optional[str],
        binding_name: Optional[str],
        pairs: Iterable[str],
    ) -> None:
        """
        Add each `key=value` pair to the binding `binding_name`, which defaults to the type.
        The first failing pair aborts the remaining ones.

        Raises:
            MissingBindingType: if no type was given
            InvalidBindingName: if the binding name (or the type standing in for it) is not
                a plain directory name
            MalformedKeyValue: for a pair without `=`
            ConfirmationDeclined: if overwriting an existing key was refused
        """
        if not binding_type:
            raise MissingBindingType("binding type is required when adding a binding")

        binding_path = self.binding_path(binding_name or binding_type)
        count = 0
        for pair in pairs:
            key, value = BindingWriter.parse_key_value(pair)
            self.writer.write(binding_path, binding_type, key, value)
            count += 1

        self.logger.log(f"Added {count} keys to binding {binding_path}", logging.INFO)

    def add_ca_certificates(
        self, cert_paths: Iterable[str], binding_name: Optional[str] = None
    ) -> None:
        """
        Add a `ca-certificates` binding with one key per certificate, named after the
        certificate's file (or `cert-<index>` when the path has none, or its name is
        `type`).
        """
        pairs = []
        for i, cert in enumerate(cert_paths):
            file_name = pathlib.PurePath(cert).name
            if not is_valid_key(file_name):
                file_name = f"cert-{i}"
            pairs.append(f"{file_name}=@{cert}")

        self.add_all(CA_CERTIFICATES_TYPE, binding_name or CA_CERTIFICATES_TYPE, pairs)

    def delete_keys(self, binding_name: str, keys: List[str]) -> None:
        """
        Delete the given keys from a binding, or the whole binding if keys is empty.

        Keys that do not exist are ignored. Every removal is confirmed first; a decline
        stops immediately, leaving keys removed so far deleted.

        Raises:
            BindingIoError: if the bindings root is not a directory or removal fails
            InvalidBindingName: if the name or any key would reach outside the binding,
                or a key names the `type` marker; nothing is deleted in that case
            ConfirmationDeclined: if a removal was refused
        """
        if not self.bindings_root.is_dir():
            raise BindingIoError(
                f"bindings home must be a directory: {self.bindings_root}",
                path=str(self.bindings_root),
            )

        binding_path = self.binding_path(binding_name)
        for key in keys:
            if not is_valid_key(key):
                raise InvalidBindingName(f"invalid binding key `{key}`")

        if keys:
            for key in keys:
                key_path = binding_path / key
                if not key_path.exists():
                    continue
                self._confirm_delete(key_path)
                try:
                    os.remove(key_path)
                except OSError as e:
                    raise BindingIoError(f"cannot delete {key_path}: {e}", path=str(key_path)) from e
                self.logger.log(f"Deleted binding key {key_path}", logging.INFO)
            return

        if not binding_path.is_dir():
            raise BindingIoError(
                f"binding does not exist: {binding_path}", path=str(binding_path)
            )
        self._confirm_delete(binding_path)
        try:
            shutil.rmtree(binding_path)
        except OSError as e:
            raise BindingIoError(f"cannot delete {binding_path}: {e}", path=str(binding_path)) from e
        self.logger.log(f"Deleted binding {binding_path}", logging.INFO)

    def _confirm_delete(self, path: pathlib.Path) -> None:
        if not self.confirmation.decide(DELETE_PROMPT.format(path=path)):
            raise ConfirmationDeclined(f"confirmation declined, not deleting {path}")

    def list_bindings(self) -> List[str]:
        """
        Names of the directories under the root that hold a `type` file.
        """
        if not self.bindings_root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.bindings_root.iterdir()
            if entry.is_dir() and (entry / TYPE_FILE).exists()
        )
