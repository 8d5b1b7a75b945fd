"""Application error taxonomy.

Every error carries the HTTP status and machine-readable code it maps to at
the API boundary. Handlers in ``geofence.main`` render them as
``{"status": "error", "message": ...}``.
"""
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    OPERATION_FAILED = "OPERATION_FAILED"
    DATABASE_ERROR = "DATABASE_ERROR"
    GEOCODING_ERROR = "GEOCODING_ERROR"


class AppError(Exception):
    """Base class for errors that are safe to surface to API clients."""

    status_code: int = 500
    code: ErrorCode = ErrorCode.DATABASE_ERROR

    def __init__(self, message: str, entity: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity = entity


class NotFoundError(AppError):
    status_code = 404
    code = ErrorCode.NOT_FOUND

    @classmethod
    def for_entity(cls, entity: str, entity_id) -> "NotFoundError":
        return cls(f"{entity} with id {entity_id} not found", entity=entity)


class OperationFailedError(AppError):
    status_code = 400
    code = ErrorCode.OPERATION_FAILED


class ValidationFailedError(OperationFailedError):
    code = ErrorCode.VALIDATION_ERROR


class InvalidStructureError(ValidationFailedError):
    """Polygon has no ring, too few points or unsupported rings."""


class NotClosedError(ValidationFailedError):
    """First and last ring positions differ."""


class InvalidCoordinatesError(ValidationFailedError):
    pass


class InvalidDistanceError(ValidationFailedError):
    pass


class RegionOverlapError(OperationFailedError):
    def __init__(self, message: str = "Region overlaps with existing regions"):
        super().__init__(message, entity="region")


class DatabaseError(AppError):
    status_code = 500
    code = ErrorCode.DATABASE_ERROR


class GeocodingError(AppError):
    """Address/coordinate resolution failed.

    ``reason`` narrows the failure (``NO_RESULTS``, ``INVALID_ADDRESS`` ...).
    """

    status_code = 400
    code = ErrorCode.GEOCODING_ERROR

    def __init__(self, message: str, reason: str = "GEOCODING_ERROR"):
        super().__init__(message, entity="user")
        self.reason = reason
