"""
Protocols (Interfaces) for Dependency Inversion.

Small, focused interfaces for the collaborators the uploader drives.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class IFileSystem(Protocol):
    """Interface for local filesystem operations."""

    def file_exists(self, path: str) -> bool:
        ...

    def file_size(self, path: str) -> Optional[int]:
        """Size in bytes, or None when it cannot be read."""
        ...

    def ensure_parent_dirs(self, path: str) -> None:
        ...

    def ensure_dir(self, path: str, recursive: bool = True) -> None:
        ...

    def move_file(self, src: str, dst: str) -> bool:
        ...

    def is_uploaded_file(self, path: str) -> bool:
        """Whether ``path`` was delivered by the upload mechanism."""
        ...


@runtime_checkable
class IMimeDetector(Protocol):
    """Interface for mime type detection."""

    def detect(self, path: str) -> str:
        ...


@runtime_checkable
class IThumbnailer(Protocol):
    """Interface for thumbnail generation."""

    def fit_within_bounds(
        self,
        src: str,
        dst: str,
        max_width: Optional[int],
        max_height: Optional[int],
    ) -> bool:
        """Resize ``src`` to the biggest size fitting the bounds, write ``dst``."""
        ...


@runtime_checkable
class IConfigLoader(Protocol):
    """Interface for configuration file loading."""

    def load(self, path: str) -> Dict[str, Any]:
        ...


class IPlacementStrategy(ABC):
    """Interface for placing a validated file."""

    @abstractmethod
    def place(
        self,
        uploader: Any,
        run: Any,
        source_path: str,
        raw_upload: Mapping[str, Any],
        payload: Dict[str, Any],
    ) -> None:
        """Place the file, recording produced paths and failures on ``run``."""
        pass
