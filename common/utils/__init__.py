"""
Response envelopes and coded HTTP exceptions.
"""

from common.utils.exceptions import (
    APIException,
    BadRequestException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from common.utils.responses import error_response, success_response

__all__ = [
    "APIException",
    "BadRequestException",
    "ConflictException",
    "NotFoundException",
    "ValidationException",
    "error_response",
    "success_response",
]
