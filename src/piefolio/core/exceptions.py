"""Application-level exceptions."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class UpstreamError(AppError):
    """Raised when the upstream portfolio API fails or answers with a non-2xx status."""

    status_code = 503

    def __init__(self, message: str, upstream_status: Optional[int] = None, code: str = "UPSTREAM_ERROR"):
        self.upstream_status = upstream_status
        super().__init__(message, code=code)


class UpstreamFormatError(UpstreamError):
    """Raised when an upstream payload cannot be normalized into a snapshot."""

    def __init__(self, message: str):
        super().__init__(message, code="UPSTREAM_FORMAT_ERROR")


class CacheError(AppError):
    """Base class for snapshot store I/O failures."""

    status_code = 503


class CacheReadError(CacheError):
    """Raised when the snapshot store cannot be read."""

    def __init__(self, user_id: str, detail: str):
        super().__init__(f"Failed to read cached portfolio for {user_id}: {detail}", code="CACHE_READ_ERROR")


class CacheWriteError(CacheError):
    """Raised when a snapshot could not be persisted."""

    def __init__(self, user_id: str, detail: str):
        super().__init__(f"Failed to persist portfolio for {user_id}: {detail}", code="CACHE_WRITE_ERROR")
