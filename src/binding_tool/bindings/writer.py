"""
Writes single binding keys to disk.
"""

import logging
import pathlib
import shutil
from typing import Optional, Tuple, Union

from binding_tool.binding_tool_exceptions import (
    BindingIoError,
    ConfirmationDeclined,
    InvalidBindingName,
    MalformedKeyValue,
    SourceNotFound,
)
from binding_tool.binding_tool_logger import BindingToolLogger
from binding_tool.bindings.confirmation import ConfirmationPolicy

TYPE_FILE = "type"
FILE_REFERENCE_PREFIX = "@"
OVERWRITE_PROMPT = "The binding already exists, do you wish to continue?"


def is_valid_binding_name(name: Optional[str]) -> bool:
    """A binding name is a single directory directly under the bindings root."""
    return bool(name) and "/" not in name and name not in (".", "..")


def is_valid_key(key: Optional[str]) -> bool:
    """A key is a single file inside the binding, other than the `type` marker."""
    return is_valid_binding_name(key) and key != TYPE_FILE


class BindingWriter:
    """
    Writes one key of a binding, plus the binding's `type` marker.

    The `type` file is always rewritten. An existing key is only overwritten if the
    confirmation policy approves.
    """

    def __init__(
        self,
        confirmation: ConfirmationPolicy,
        logger: Optional[BindingToolLogger] = None,
    ):
        self.confirmation = confirmation
        self.logger = logger or BindingToolLogger()

    @staticmethod
    def parse_key_value(pair: str) -> Tuple[str, str]:
        """
        Split `key=value` at the first `=`. The value may itself contain `=`.

        Raises:
            MalformedKeyValue: if there is no `=`, or the key is empty, names a path
                or is the `type` marker
        """
        key, separator, value = pair.partition("=")
        if not separator:
            raise MalformedKeyValue(f"could not parse key/value -> {pair}")
        if not is_valid_key(key):
            raise MalformedKeyValue(f"invalid binding key `{key}` in -> {pair}")
        return key, value

    def write(
        self,
        binding_path: Union[str, pathlib.Path],
        binding_type: str,
        key: str,
        value: Union[str, bytes],
    ) -> pathlib.Path:
        """
        Write value to `binding_path/key`. A str value starting with `@` names a file
        whose bytes are copied instead.

        Returns the path of the key file.

        Raises:
            ConfirmationDeclined: if the key exists and overwriting was refused
            InvalidBindingName: if key is not a plain file name inside the binding
            SourceNotFound: if an `@file` reference does not resolve
            BindingIoError: on any other filesystem failure
        """
        if not is_valid_key(key):
            raise InvalidBindingName(f"invalid binding key `{key}`")
        binding_path = pathlib.Path(binding_path)
        key_path = binding_path / key

        try:
            binding_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BindingIoError(f"cannot create {binding_path}: {e}", path=str(binding_path)) from e

        self.write_type(binding_path, binding_type)

        if key_path.exists():
            if not self.confirmation.decide(OVERWRITE_PROMPT):
                raise ConfirmationDeclined(f"binding already exists: {key_path}")

        if isinstance(value, str) and value.startswith(FILE_REFERENCE_PREFIX):
            self._write_key_as_file(key_path, value[len(FILE_REFERENCE_PREFIX):])
        else:
            self._write_key_as_value(key_path, value)

        self.logger.log(f"Wrote binding key {key_path}", logging.DEBUG)
        return key_path

    def write_type(self, binding_path: pathlib.Path, binding_type: str) -> None:
        type_path = binding_path / TYPE_FILE
        try:
            type_path.write_text(binding_type, encoding="utf-8")
        except OSError as e:
            raise BindingIoError(f"cannot write the type file {type_path}: {e}", path=str(type_path)) from e

    def _write_key_as_file(self, key_path: pathlib.Path, source: str) -> None:
        try:
            source_path = pathlib.Path(source).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise SourceNotFound(f"cannot canonicalize path to source file: {source}") from e

        try:
            shutil.copyfile(source_path, key_path)
        except OSError as e:
            raise BindingIoError(
                f"failed to copy {source_path} to {key_path}: {e}", path=str(key_path)
            ) from e

    def _write_key_as_value(self, key_path: pathlib.Path, value: Union[str, bytes]) -> None:
        data = value.encode("utf-8") if isinstance(value, str) else value
        try:
            key_path.write_bytes(data)
        except OSError as e:
            raise BindingIoError(
                f"cannot write to binding key path: {key_path}: {e}", path=str(key_path)
            ) from e
