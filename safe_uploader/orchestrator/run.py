"""Mutable recorder for the run in progress."""
import logging
from typing import Any, Dict, List, Optional

from ..errors import SafeUploaderError
from ..models import ErrorMode, RunResult, RunStatus

logger = logging.getLogger(__name__)


class RunRecorder:
    """
    Collects what a run produces until it is frozen into a RunResult.

    Only lives while the uploader executes one run.
    """

    def __init__(self, error_mode: ErrorMode):
        self.error_mode = error_mode
        self.failures: List[SafeUploaderError] = []
        self.uploaded_file_path: Optional[str] = None
        self.uploaded_file_paths: List[str] = []
        self.profile: Optional[Dict[str, Any]] = None
        self.real_url: Optional[str] = None
        self.placed = False

    def fail(self, error: SafeUploaderError) -> None:
        """Record ``error``; in raise mode also raise it, ending the run."""
        self.failures.append(error)
        if self.error_mode == ErrorMode.RAISE:
            raise error
        logger.warning(f"[run] {type(error).__name__}: {error}")

    def set_uploaded_file_path(self, path: str) -> None:
        self.uploaded_file_path = path
        self.add_uploaded_file_path(path)
        self.placed = True

    def add_uploaded_file_path(self, path: str) -> None:
        if path not in self.uploaded_file_paths:
            self.uploaded_file_paths.append(path)

    def mark_placed(self) -> None:
        self.placed = True

    def to_result(self) -> RunResult:
        if not self.placed:
            status = RunStatus.FAILED
        elif self.failures:
            status = RunStatus.PARTIAL
        else:
            status = RunStatus.SUCCESS
        return RunResult(
            status=status,
            uploaded_file_path=self.uploaded_file_path,
            uploaded_file_paths=tuple(self.uploaded_file_paths),
            failures=tuple(self.failures),
            profile=dict(self.profile) if self.profile is not None else None,
            real_url=self.real_url,
        )
