"""
Response envelopes shared by every endpoint.

Success: ``{"success": true, "data": ..., "message"?: ...}``
Error:   ``{"success": false, "error": {"message", "code"?, "details"?}}``

Example:
    from common.utils import success_response

    @router.get("/users/{user_id}/streak")
    async def get_streak(user_id: str):
        streak = await pipelines.get_streak_pipeline(...)
        return success_response(streak)

Errors are normally raised as ``APIException`` and wrapped by the API's
exception handlers rather than built by hand.
"""

from typing import Any, Dict, Optional


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Wrap a pipeline result in the success envelope.

    Args:
        data: Any JSON-serializable payload; omitted when None
        message: Optional human-readable message; omitted when empty

    Returns:
        Dictionary with success=True and optional data/message
    """
    envelope: Dict[str, Any] = {"success": True}
    if data is not None:
        envelope["data"] = data
    if message:
        envelope["message"] = message
    return envelope


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """
    Build the error envelope used by the API exception handlers.

    Args:
        message: Human-readable error message
        code: Machine-readable error code (e.g. "INVALID_MOOD")
        details: Additional error details, such as request validation errors

    Returns:
        Dictionary with success=False and the error object
    """
    error = {"message": message}
    if code:
        error["code"] = code
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}
