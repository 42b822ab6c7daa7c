"""
Exception hierarchy for the upload core.

Validation errors are recorded on upload records and never raised to the
caller of ``submit``; transport errors are classified as either aborted or
other failures.
"""

import asyncio
from enum import Enum
from typing import Optional


class ErrorLevel(Enum):
    """Error level definitions"""
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ErrorKind(Enum):
    """Classification of everything that can stop a file from uploading."""
    SIZE_EXCEEDED = "size_exceeded"
    TYPE_NOT_ALLOWED = "type_not_allowed"
    ABORTED = "aborted"
    OTHER_FAILURE = "other_failure"


class FiledropError(Exception):
    """Base class for filedrop exceptions"""

    def __init__(self, message: str, error_code: Optional[str] = "",
                 level: ErrorLevel = ErrorLevel.ERROR):
        self.message = message
        self.error_code = error_code
        self.level = level
        super().__init__(self.message)


class ConfigurationError(FiledropError):
    """Invalid configuration value"""

    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR", ErrorLevel.CRITICAL)


class TransportError(FiledropError):
    """Network or server failure reported by a transport"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message, "TRANSPORT_ERROR", ErrorLevel.ERROR)
        self.status = status
        self.kind = ErrorKind.OTHER_FAILURE


class UploadAbortedError(FiledropError):
    """The transport stopped because cancellation was requested"""

    def __init__(self, message: str = "Upload aborted"):
        super().__init__(message, "UPLOAD_ABORTED", ErrorLevel.INFO)
        self.kind = ErrorKind.ABORTED


def is_abort(error: BaseException) -> bool:
    """Return True when a transport error means the upload was aborted."""
    if isinstance(error, (UploadAbortedError, asyncio.CancelledError)):
        return True
    return getattr(error, 'kind', None) is ErrorKind.ABORTED
