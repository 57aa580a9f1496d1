"""Error taxonomy for safe uploader runs."""


class SafeUploaderError(Exception):
    """Base class for every failure reported by a run."""


class ConfigNotFoundError(SafeUploaderError):
    """Configuration file is not set or does not exist."""


class ConfigParseError(SafeUploaderError):
    """Configuration file could not be parsed into a mapping."""


class ProfileNotFoundError(SafeUploaderError):
    """Profile identifier is missing from the configuration."""


class InvalidProfileTypeError(SafeUploaderError):
    """Profile entry is not a mapping, or one of its keys has the wrong type."""


class SourceNotFoundError(SafeUploaderError):
    """Source file does not exist."""


class SizeError(SafeUploaderError):
    """File is too big, or its size could not be determined."""


class MimeTypeError(SafeUploaderError):
    """Detected mime type is not accepted by the profile."""


class MoveFailedError(SafeUploaderError):
    """Source file could not be moved to its destination."""


class ThumbnailFailedError(SafeUploaderError):
    """One thumbnail could not be produced."""


class StructuralUploadError(SafeUploaderError):
    """Raw upload descriptor is missing, malformed or reports a transport error."""
