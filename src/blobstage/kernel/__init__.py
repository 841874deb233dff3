"""Kernel – framework-agnostic error hierarchy."""

from blobstage.kernel.errors import (
    ApplicationError,
    BaseError,
    ConflictError,
    DomainError,
    InfrastructureError,
    InvalidInputError,
    InvariantViolationError,
    NameResolutionExhaustedError,
    UploadFailedError,
    ValidationError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "InvalidInputError",
    "InvariantViolationError",
    "NameResolutionExhaustedError",
    "UploadFailedError",
    "ValidationError",
]
