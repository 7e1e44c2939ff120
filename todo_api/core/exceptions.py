"""
Application exception hierarchy.

Every failure the API reports on purpose is an ``AppException``; the
handlers registered in ``todo_api.main`` render them as
``{"error": {"code", "message", "details"}}`` with the exception's status.
"""

from typing import Any, Dict, List, Optional

from fastapi import status


class AppException(Exception):
    """Base class for application errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "APPLICATION_ERROR"
    message: str = "Application error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.message
        self.details = details or {}
        self.headers = headers
        super().__init__(self.message)


class BadRequestException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"
    message = "Bad request"


class ValidationException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    message = "Validation failed"


class UnauthorizedException(AppException):
    """
    Authentication failure.

    The public message is the same for every cause so that clients cannot
    tell an unknown user from a wrong password, or an expired token from a
    forged one. The concrete cause is kept in ``reason`` for logging only.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    message = "Authentication required"

    def __init__(self, reason: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})
        self.reason = reason or self.message


class NotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    message = "Resource not found"


# ==================== DOMAIN ERRORS ====================

class TaskNotFoundError(NotFoundException):
    error_code = "TASK_NOT_FOUND"

    def __init__(self, task_id: int):
        super().__init__(f"Task {task_id} does not exist", details={"task_id": task_id})
        self.task_id = task_id


class CommentNotFoundError(NotFoundException):
    error_code = "COMMENT_NOT_FOUND"

    def __init__(self, comment_id: int):
        super().__init__(
            f"Comment {comment_id} does not exist", details={"comment_id": comment_id}
        )
        self.comment_id = comment_id


class ParentCommentNotFoundError(BadRequestException):
    error_code = "PARENT_COMMENT_NOT_FOUND"

    def __init__(self, parent_comment_id: int):
        super().__init__(
            f"Parent comment {parent_comment_id} does not exist",
            details={"parent_comment_id": parent_comment_id},
        )
        self.parent_comment_id = parent_comment_id


class ParentInDifferentTaskError(BadRequestException):
    error_code = "PARENT_IN_DIFFERENT_TASK"

    def __init__(self, parent_comment_id: int, task_id: int):
        super().__init__(
            f"Parent comment {parent_comment_id} does not belong to task {task_id}",
            details={"parent_comment_id": parent_comment_id, "task_id": task_id},
        )
        self.parent_comment_id = parent_comment_id
        self.task_id = task_id


class IdMismatchError(BadRequestException):
    error_code = "ID_MISMATCH"

    def __init__(self, path_id: int, body_id: Optional[int]):
        super().__init__(
            "Identifier in the path does not match the identifier in the body",
            details={"path_id": path_id, "body_id": body_id},
        )


class RegistrationError(ValidationException):
    """Registration rejected by the credential store."""

    error_code = "REGISTRATION_FAILED"

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__("User registration failed", details={"errors": errors})
        self.errors = errors


class InvalidTokenError(UnauthorizedException):
    """Token is malformed, has the wrong issuer/audience, or lacks claims."""


class TokenExpiredError(InvalidTokenError):
    pass


class TokenSignatureError(InvalidTokenError):
    pass
