"""
Dependency fetcher implementation.

Downloads the artifacts of a dependency-mapping binding with a fixed-size pool of
worker threads draining a shared queue.
"""

import logging
import pathlib
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from binding_tool.binding_tool_config import BindingToolConfig
from binding_tool.binding_tool_exceptions import (
    BindingToolException,
    ChecksumMismatch,
    WorkerFailure,
)
from binding_tool.binding_tool_logger import BindingToolLogger
from binding_tool.binding_tool_utils import ChecksumVerifier, FileUtils, HttpUtils
from binding_tool.dependency_config.config_manager import (
    DependencyConfigManager,
    DependencyState,
    DownloadPlan,
    DownloadStatus,
)
from binding_tool.dependency_models import Dependency


class DependencyFetcher:
    """
    Fetches dependencies into `<binding>/binaries`.

    Each worker pops one plan at a time. Artifacts whose file already matches the
    declared digest are skipped without a request, so repeated fetches are idempotent.
    The first failure stops every worker from taking further work once its current
    item is done; all workers are joined before that failure is raised.

    Freshly downloaded bytes are not checked against the digest unless
    `verify_downloads` is enabled in the configuration.
    """

    def __init__(
        self,
        config: BindingToolConfig,
        logger: Optional[BindingToolLogger] = None,
        session=None,
    ):
        """
        Args:
            config: Pool size, timeouts and proxy
            logger: Logger for progress and error messages
            session: requests-compatible session shared by all workers; one is
                created from config for each fetch when omitted
        """
        self.config = config
        self.logger = logger or BindingToolLogger()
        self.session = session
        self.config_manager: Optional[DependencyConfigManager] = None
        self._failures: List[BindingToolException] = []
        self._failures_lock = threading.Lock()

    def fetch(self, dependencies: List[Dependency], binding_path: pathlib.Path) -> None:
        """
        Fetch every dependency into `binding_path/binaries`, which must already exist.

        Raises:
            BindingToolException: the first failure recorded by any worker
        """
        self.config_manager = DependencyConfigManager(dependencies, binding_path)
        plans = self.config_manager.create_download_plan()
        self._failures = []

        if not plans:
            self.logger.log("No dependencies to fetch", logging.INFO)
            return

        work: "queue.Queue[DownloadPlan]" = queue.Queue()
        for plan in plans:
            work.put(plan)

        pool_size = min(self.config.max_simultaneous, len(plans))
        self.logger.log(
            f"Fetching {len(plans)} dependencies into {binding_path} with {pool_size} workers",
            logging.INFO,
        )

        abort = threading.Event()
        session = self.session or HttpUtils.create_session(self.config)
        try:
            with ThreadPoolExecutor(
                max_workers=pool_size, thread_name_prefix="bt-fetch"
            ) as executor:
                futures = [
                    executor.submit(self._worker, work, abort, session)
                    for _ in range(pool_size)
                ]
                for future in futures:
                    try:
                        future.result()
                    except Exception as e:  # pylint: disable=broad-except
                        self._record_failure(
                            WorkerFailure(f"download worker terminated abnormally: {e!r}"),
                            abort,
                        )
        finally:
            if self.session is None:
                session.close()

        summary = self.get_download_summary()
        self.logger.log(
            f"Fetch summary: {summary['completed']} completed, {summary['skipped']} skipped, "
            f"{summary['failed']} failed, {summary['pending']} pending",
            logging.INFO,
        )

        if self._failures:
            raise self._failures[0]

    def _worker(self, work: "queue.Queue[DownloadPlan]", abort: threading.Event, session) -> None:
        while not abort.is_set():
            try:
                plan = work.get_nowait()
            except queue.Empty:
                return

            try:
                self.fetch_dependency(plan, session)
            except BindingToolException as e:
                self._fail(plan, e, abort)
                return
            except Exception as e:  # pylint: disable=broad-except
                failure = WorkerFailure(f"download worker failed on {plan.url}: {e!r}")
                failure.__cause__ = e
                self._fail(plan, failure, abort)
                return

    def fetch_dependency(self, plan: DownloadPlan, session) -> None:
        """
        Fetch a single dependency unless the artifact on disk already matches its digest.
        """
        self.config_manager.mark_in_progress(plan)
        destination = plan.destination_path
        digest = plan.dependency.digest

        if ChecksumVerifier.matches(str(destination), digest):
            self.logger.log(
                f"Skipping {plan.url}, {destination} already matches its checksum",
                logging.INFO,
            )
            self.config_manager.mark_download_completed(plan, DownloadStatus.SKIPPED)
            return

        self.logger.log(f"Downloading {plan.url} to {destination}", logging.INFO)
        written = FileUtils.download_file(
            self.logger, session, plan.url, str(destination), self.config
        )

        if self.config.verify_downloads and not ChecksumVerifier.matches(
            str(destination), digest
        ):
            raise ChecksumMismatch(
                f"checksum of {destination} downloaded from {plan.url} does not match {digest}"
            )

        self.config_manager.mark_download_completed(plan, DownloadStatus.COMPLETED)
        self.logger.log(
            f"Successfully downloaded {plan.url} ({written} bytes)", logging.INFO
        )

    def _fail(self, plan: DownloadPlan, error: BindingToolException, abort: threading.Event) -> None:
        self.logger.log(f"Download of {plan.url} failed with error {error}", logging.ERROR)
        self.config_manager.mark_download_completed(
            plan, DownloadStatus.FAILED, error_message=str(error)
        )
        self._record_failure(error, abort)

    def _record_failure(self, error: BindingToolException, abort: threading.Event) -> None:
        with self._failures_lock:
            self._failures.append(error)
        abort.set()

    def get_dependency_states(self) -> Dict[str, DependencyState]:
        """
        Get the state of every dependency processed by the last fetch, keyed by URI.
        """
        if self.config_manager is None:
            return {}
        return self.config_manager.get_dependency_states()

    def get_download_summary(self) -> dict:
        """
        Get a summary of the last fetch.

        Returns:
            Dictionary with counts of completed, skipped, failed and pending (never
            attempted) dependencies
        """
        if self.config_manager is None:
            return {"completed": 0, "skipped": 0, "failed": 0, "pending": 0, "total": 0}

        states = self.config_manager.get_dependency_states().values()
        completed = sum(1 for s in states if s.download_status == DownloadStatus.COMPLETED)
        skipped = sum(1 for s in states if s.download_status == DownloadStatus.SKIPPED)
        failed = sum(1 for s in states if s.download_status == DownloadStatus.FAILED)
        pending = len(self.config_manager.get_pending_downloads())

        return {
            "completed": completed,
            "skipped": skipped,
            "failed": failed,
            "pending": pending,
            "total": len(self.config_manager.download_plans),
        }
