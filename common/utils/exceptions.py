"""
HTTP exceptions carrying machine-readable error codes.

Each exception's ``detail`` is ``{"message", "code", "details"?}``; the API's
exception handler turns it into the standard error envelope, so clients branch
on ``code`` (e.g. ``DUPLICATE_DAY``, ``POD_FULL``) rather than on messages.

Example:
    from common.utils import ConflictException, NotFoundException

    doc = await pods.find_one({"_id": ObjectId(pod_id)})
    if not doc:
        raise NotFoundException("Pod not found", code="POD_NOT_FOUND")
    pod = PodService.from_document(doc)
    if not pod.has_capacity:
        raise ConflictException("Pod is full", code="POD_FULL", details={"capacity": pod.capacity})
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException


class APIException(HTTPException):
    """
    Base for every error the API reports on purpose.

    Subclasses set ``status_code`` plus a default message and code; callers
    override either per raise.
    """

    status_code = 500
    default_message = "Internal error"
    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Create an API exception.

        Args:
            message: Human-readable error message (defaults to ``default_message``)
            code: Machine-readable error code (defaults to ``default_code``)
            details: Additional error details, passed through to the envelope
            headers: Optional response headers
        """
        detail: Dict[str, Any] = {
            "message": message or self.default_message,
            "code": code or self.default_code,
        }
        if details is not None:
            detail["details"] = details

        super().__init__(status_code=self.status_code, detail=detail, headers=headers)

    @property
    def code(self) -> str:
        return self.detail["code"]

    @property
    def message(self) -> str:
        return self.detail["message"]


class BadRequestException(APIException):
    """Malformed input the schema layer could not catch (e.g. a bad ISO week)."""
    status_code = 400
    default_message = "Bad request"
    default_code = "BAD_REQUEST"


class NotFoundException(APIException):
    """Unknown pod or learner."""
    status_code = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictException(APIException):
    """State conflicts: duplicate check-in day, full or dissolved pod."""
    status_code = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class ValidationException(APIException):
    """A check-in or request broke a business rule."""
    status_code = 422
    default_message = "Validation error"
    default_code = "VALIDATION_ERROR"
