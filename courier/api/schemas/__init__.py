"""Payload schemas for API responses."""

from courier.api.schemas.errors import ErrorResponse, ErrorType, ExceptionSummary
from courier.api.schemas.success import SuccessResponse

__all__ = ["ErrorResponse", "ErrorType", "ExceptionSummary", "SuccessResponse"]
