"""
This file contains various utility functions like checksum verification, HTTP session
construction and downloading files.
"""

import hashlib
import logging
import os
import time
from typing import Optional

import requests

from binding_tool.binding_tool_config import BindingToolConfig
from binding_tool.binding_tool_exceptions import BindingIoError, NetworkError
from binding_tool.binding_tool_logger import BindingToolLogger

CHUNK_SIZE = 1 << 16


class ChecksumVerifier:
    """
    Compares on-disk files against expected SHA-256 digests. Never modifies the filesystem.
    """

    @staticmethod
    def sha256_file(path: str) -> str:
        """
        Stream the file at path through SHA-256 and return the lower-case hex digest.
        """
        hasher = hashlib.sha256()
        try:
            with open(path, "rb") as stream:
                for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
                    hasher.update(chunk)
        except OSError as e:
            raise BindingIoError(f"cannot read file {path}: {e}", path=str(path)) from e
        return hasher.hexdigest()

    @staticmethod
    def matches(path: str, expected_hex_digest: str) -> bool:
        """
        Returns False if path does not exist, otherwise whether its SHA-256 equals
        expected_hex_digest (compared case-insensitively).

        Raises:
            BindingIoError: if the file exists but cannot be read
        """
        if not os.path.exists(path):
            return False
        actual = ChecksumVerifier.sha256_file(path)
        return actual == expected_hex_digest.strip().lower()


class HttpUtils:
    """
    Builds the HTTP session shared by all download workers.
    """

    @staticmethod
    def create_session(config: BindingToolConfig) -> requests.Session:
        """
        Create a requests session configured once from the given config.

        Timeouts are applied per request (see FileUtils.download_file); only the proxy
        lives on the session. Without an explicit proxy, requests keeps honouring the
        standard HTTP(S)_PROXY variables.
        """
        session = requests.Session()
        if config.proxy:
            session.proxies.update({"http": config.proxy, "https": config.proxy})
        return session

    @staticmethod
    def get_text(session, uri: str, config: BindingToolConfig) -> str:
        """
        GET uri and return the decoded body.

        Raises:
            NetworkError: on connection failure or a non-success status
        """
        try:
            response = session.get(uri, timeout=config.timeouts())
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            raise NetworkError(f"failed on url {uri}: {e}", uri=uri) from e


class FileUtils:
    """
    Utility functions for files
    """

    @staticmethod
    def download_file(
        logger: BindingToolLogger,
        session,
        url: str,
        target_path: str,
        config: BindingToolConfig,
    ) -> int:
        """
        Stream the body of a single GET request for url into target_path, overwriting it.

        Returns the number of bytes written.

        Raises:
            NetworkError: on connection failure, non-success status, or when the overall
                request timeout elapses while streaming
            BindingIoError: if target_path cannot be written
        """
        started = time.monotonic()
        written = 0
        try:
            response = session.get(url, stream=True, timeout=config.timeouts())
        except requests.RequestException as e:
            raise NetworkError(f"failed on url {url}: {e}", uri=url) from e

        try:
            if not 200 <= response.status_code < 300:
                logger.log(
                    f"Error downloading file '{url}': {response.status_code}",
                    logging.ERROR,
                )
                try:
                    response.raise_for_status()
                except requests.RequestException as e:
                    raise NetworkError(f"failed on url {url}: {e}", uri=url) from e
                raise NetworkError(
                    f"failed on url {url}: unexpected status {response.status_code}",
                    uri=url,
                )

            try:
                with open(target_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if _deadline_passed(started, config.request_timeout):
                            raise NetworkError(
                                f"failed on url {url}: request exceeded "
                                f"{config.request_timeout}s",
                                uri=url,
                            )
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)
            except requests.RequestException as e:
                raise NetworkError(f"failed on url {url}: {e}", uri=url) from e
            except OSError as e:
                raise BindingIoError(
                    f"cannot write file {target_path}: {e}", path=str(target_path)
                ) from e
        finally:
            response.close()

        return written


def _deadline_passed(started: float, request_timeout: Optional[float]) -> bool:
    if request_timeout is None:
        return False
    return time.monotonic() - started > request_timeout
