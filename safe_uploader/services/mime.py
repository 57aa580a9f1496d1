"""
Mime Service - Single Responsibility: detect the mime type of a file.

The type is read from the file content with libmagic; the file name plays no
part, so extensionless upload temp files and renamed files are judged by what
they contain.
"""
import logging

import magic

from ..protocols import IMimeDetector

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class MimeTypeService(IMimeDetector):
    """Mime type detection for uploaded files."""

    def detect(self, path: str) -> str:
        try:
            mimetype = magic.from_file(str(path), mime=True)
        except (OSError, magic.MagicException) as e:
            logger.warning(f"[mime] Could not inspect {path}: {e}")
            return DEFAULT_MIME_TYPE
        return mimetype or DEFAULT_MIME_TYPE
