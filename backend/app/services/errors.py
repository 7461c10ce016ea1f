"""
Service-layer errors.

Services raise these; app.main renders them as {"detail": ..., "code": ...}.
"""
from typing import Optional


class ServiceError(Exception):
    code = "SERVICE_ERROR"
    status_code = 400

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code
        self.message = message


class NotFoundError(ServiceError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(ServiceError):
    code = "CONFLICT"
    status_code = 409


class ValidationError(ServiceError):
    code = "VALIDATION_ERROR"
    status_code = 422


class UnauthorizedError(ServiceError):
    code = "UNAUTHORIZED"
    status_code = 403


# Rate resolution
class NoZoneConfigured(NotFoundError):
    code = "NO_ZONE_CONFIGURED"


class NoRateConfigured(NotFoundError):
    code = "NO_RATE_CONFIGURED"


class NoWeightSlabConfigured(NotFoundError):
    code = "NO_WEIGHT_SLAB_CONFIGURED"


class InvalidSlabConfiguration(ValidationError):
    code = "INVALID_SLAB_CONFIGURATION"


# Orders
class OrderNotFound(NotFoundError):
    code = "ORDER_NOT_FOUND"


class InvalidStatusTransition(ValidationError):
    code = "INVALID_STATUS_TRANSITION"
