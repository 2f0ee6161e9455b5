"""
Dependency fetch planning.

Turns the parsed dependency list into download plans for a binding directory and
tracks the state of each dependency while workers process the plans.
"""

import pathlib
import threading
from typing import Dict, List, Optional

from binding_tool.dependency_models import Dependency

BINARIES_DIRECTORY = "binaries"


class DownloadStatus:
    """Enumeration of download statuses."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"


class DownloadPlan:
    """
    A plan to download a specific dependency into a binding's `binaries` directory.
    """

    def __init__(
            self,
            dependency: Dependency,
            binding_path: pathlib.Path,
            status: str = DownloadStatus.PENDING,
    ):
        """
        Initialize a download plan.

        Args:
            dependency: The Dependency object
            binding_path: The binding directory the artifact belongs to
            status: Current download status
        """
        self.dependency = dependency
        self.binding_path = pathlib.Path(binding_path)
        self.status = status
        self.error_message: Optional[str] = None

    @property
    def url(self) -> str:
        return self.dependency.uri

    @property
    def destination_path(self) -> pathlib.Path:
        """
        `<binding>/binaries/<filename>`. Derived on access, so an unusable URI
        surfaces as InvalidDependencyUri in the worker that processes the plan.
        """
        return self.binding_path / BINARIES_DIRECTORY / self.dependency.filename()

    def __repr__(self) -> str:
        return f"DownloadPlan(status={self.status}, url={self.url})"


class DependencyState:
    """
    Current state of a dependency.

    Tracks whether a dependency has been fetched and where it's located.
    """

    def __init__(
            self,
            uri: str,
            download_status: str,
            downloaded_path: Optional[str] = None,
            error_message: Optional[str] = None,
    ):
        self.uri = uri
        self.download_status = download_status
        self.downloaded_path = downloaded_path
        self.error_message = error_message

    def is_downloaded(self) -> bool:
        """Check if the artifact is present on disk, fetched now or already satisfied."""
        return self.download_status in (DownloadStatus.COMPLETED, DownloadStatus.SKIPPED)

    def __repr__(self) -> str:
        return (
            f"DependencyState(uri={self.uri}, "
            f"status={self.download_status}, path={self.downloaded_path})"
        )


class DependencyConfigManager:
    """
    Holds the download plans for one fetch and the resulting per-dependency states.

    Plan status updates come from several worker threads and are serialized with a lock.
    """

    def __init__(self, dependencies: List[Dependency], binding_path: pathlib.Path):
        """
        Args:
            dependencies: Dependencies parsed from the manifest
            binding_path: The binding directory; artifacts go to its `binaries` subdirectory
        """
        self.dependencies = list(dependencies)
        self.binding_path = pathlib.Path(binding_path)
        self.download_plans: List[DownloadPlan] = []
        self.dependency_states: Dict[str, DependencyState] = {}
        self._lock = threading.Lock()

    def create_download_plan(self) -> List[DownloadPlan]:
        """
        Create one pending plan per dependency, in manifest order.
        """
        self.download_plans = [
            DownloadPlan(dependency=dep, binding_path=self.binding_path)
            for dep in self.dependencies
        ]
        self.dependency_states = {}
        return self.download_plans

    def get_pending_downloads(self) -> List[DownloadPlan]:
        """
        Get all pending downloads.
        """
        with self._lock:
            return [p for p in self.download_plans if p.status == DownloadStatus.PENDING]

    def mark_in_progress(self, plan: DownloadPlan) -> None:
        with self._lock:
            plan.status = DownloadStatus.IN_PROGRESS

    def mark_download_completed(
        self, plan: DownloadPlan, status: str, error_message: Optional[str] = None
    ) -> None:
        """
        Record the outcome of a plan.

        Args:
            plan: The download plan to mark
            status: COMPLETED, SKIPPED or FAILED
            error_message: Why the plan failed, if it did
        """
        with self._lock:
            plan.status = status
            plan.error_message = error_message
            downloaded_path = None
            if status != DownloadStatus.FAILED:
                downloaded_path = str(plan.destination_path)
            self.dependency_states[plan.url] = DependencyState(
                uri=plan.url,
                download_status=status,
                downloaded_path=downloaded_path,
                error_message=error_message,
            )

    def get_dependency_states(self) -> Dict[str, DependencyState]:
        """
        Get the states of all processed dependencies, keyed by URI.
        """
        with self._lock:
            return dict(self.dependency_states)

    def get_dependency_state(self, uri: str) -> Optional[DependencyState]:
        with self._lock:
            return self.dependency_states.get(uri)
