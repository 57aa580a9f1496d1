"""
Filesystem Service - Single Responsibility: local file operations.

Thin wrapper over os/shutil used by the uploader for probing, creating
directories and moving files.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Tuple
import logging

from ..protocols import IFileSystem

logger = logging.getLogger(__name__)


class LocalFileSystem(IFileSystem):
    """
    Local filesystem collaborator.

    ``upload_dirs`` lists the directories the upload mechanism writes its
    temporary files to; only files inside them count as uploaded files.
    """

    def __init__(self, upload_dirs: Optional[Iterable[str]] = None):
        dirs = upload_dirs if upload_dirs is not None else [tempfile.gettempdir()]
        self._upload_dirs: Tuple[Path, ...] = tuple(Path(d).resolve() for d in dirs)

    @property
    def upload_dirs(self) -> Tuple[Path, ...]:
        return self._upload_dirs

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()

    def file_size(self, path: str) -> Optional[int]:
        try:
            return Path(path).stat().st_size
        except OSError as e:
            logger.debug(f"[fs] Cannot stat {path}: {e}")
            return None

    def ensure_parent_dirs(self, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    def ensure_dir(self, path: str, recursive: bool = True) -> None:
        Path(path).mkdir(parents=recursive, exist_ok=True)

    def move_file(self, src: str, dst: str) -> bool:
        try:
            shutil.move(src, dst)
        except OSError as e:
            logger.error(f"[fs] Move failed {src} -> {dst}: {e}")
            return False
        return True

    def is_uploaded_file(self, path: str) -> bool:
        try:
            resolved = Path(path).resolve()
        except OSError:
            return False
        if not resolved.is_file():
            return False
        return any(
            os.path.commonpath([str(resolved), str(upload_dir)]) == str(upload_dir)
            for upload_dir in self._upload_dirs
        )
