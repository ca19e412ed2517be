# bonsai_gateway/core/errors.py
from typing import Optional


class ApiError(Exception):
    """Base error rendered as {"success": false, "error": message}."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class NotConfiguredError(ApiError):
    status_code = 400


class UpstreamError(ApiError):
    """Non-2xx reply or network failure from a vendor API."""
    status_code = 400

    def __init__(self, message: str, upstream_status: Optional[int] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.upstream_status = upstream_status


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


class InternalError(ApiError):
    status_code = 500
