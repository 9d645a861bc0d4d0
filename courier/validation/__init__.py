"""Mapping of request data onto validated Pydantic models."""

from courier.validation.mapper import ObjectMapper
from courier.validation.request_mapper import RequestValidationMapper
from courier.validation.result import (
    MappingFailed,
    MappingFailedMulti,
    MappingOk,
    MappingResult,
)
from courier.validation.validator import RequestValidator

__all__ = [
    "MappingFailed",
    "MappingFailedMulti",
    "MappingOk",
    "MappingResult",
    "ObjectMapper",
    "RequestValidationMapper",
    "RequestValidator",
]
