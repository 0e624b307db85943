"""
Typed API failures.
Each error carries a stable (error code, message) pair and an HTTP status;
api/errors.py turns them into the uniform error envelope.
"""
from __future__ import annotations


class ApiError(Exception):
    status = 500
    error = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, reason: str | None = None):
        self.message = message or self.default_message
        # diagnostic tag for logs and tests, never sent to the client
        self.reason = reason
        super().__init__(self.message)


class NotFoundError(ApiError):
    status = 404
    error = "NOT_FOUND"
    default_message = "Resource not found"


class UnauthorizedError(ApiError):
    status = 401
    error = "UNAUTHORIZED"
    default_message = "Unauthorized request"


class ConflictError(ApiError):
    status = 409
    error = "CONFLICT"
    default_message = "Conflict"


class InternalError(ApiError):
    pass
