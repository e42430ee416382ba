"""
Infrastructure shared by the Study Pods API and jobs: settings base class,
motor client wrapper, response envelopes and coded HTTP exceptions.
"""

from common.config import BaseAppSettings
from common.database import MongoDB
from common.utils import (
    APIException,
    BadRequestException,
    ConflictException,
    NotFoundException,
    ValidationException,
    error_response,
    success_response,
)

__all__ = [
    "BaseAppSettings",
    "MongoDB",
    "APIException",
    "BadRequestException",
    "ConflictException",
    "NotFoundException",
    "ValidationException",
    "error_response",
    "success_response",
]
