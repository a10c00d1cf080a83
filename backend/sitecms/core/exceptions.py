"""Application error types.

Every business failure is raised as an ``AppError`` subclass carrying the HTTP
status code and message that the API layer renders verbatim. Asset cleanup
failures use ``UpstreamAssetError`` and are logged by the caller, never
surfaced.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors surfaced through the API envelope."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors

    @property
    def status(self) -> str:
        return "fail" if self.status_code < 500 else "error"


class ValidationFailed(AppError):
    status_code = 400


class InvalidFilter(AppError):
    status_code = 400


class Unauthenticated(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 400


class UploadRejected(AppError):
    status_code = 400


class InternalError(AppError):
    status_code = 500


class UpstreamAssetError(AppError):
    """Object-store failure while reclaiming a stale asset."""

    status_code = 502


class RateLimited(AppError):
    status_code = 429
