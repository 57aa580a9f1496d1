"""Services for safe_uploader module."""
from .config import ConfigService, get_profiles
from .filesystem import LocalFileSystem
from .mime import MimeTypeService
from .thumbnail import ThumbnailService

__all__ = [
    "ConfigService",
    "get_profiles",
    "LocalFileSystem",
    "MimeTypeService",
    "ThumbnailService",
]
