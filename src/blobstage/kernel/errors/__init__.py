"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError                       (domain.py)
    │   ├── InvariantViolationError
    │   ├── ValidationError
    │   │   └── InvalidInputError
    │   └── ConflictError
    │       └── NameResolutionExhaustedError
    ├── ApplicationError                  (application.py)
    └── InfrastructureError               (infrastructure.py)
        └── UploadFailedError
"""

from blobstage.kernel.errors.application import ApplicationError
from blobstage.kernel.errors.base import BaseError
from blobstage.kernel.errors.domain import (
    ConflictError,
    DomainError,
    InvalidInputError,
    InvariantViolationError,
    NameResolutionExhaustedError,
    ValidationError,
)
from blobstage.kernel.errors.infrastructure import InfrastructureError, UploadFailedError

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
