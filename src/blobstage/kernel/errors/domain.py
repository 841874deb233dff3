"""Domain errors – input, invariant and naming violations."""

from __future__ import annotations

from typing import Any

from blobstage.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a domain rule / invariant is violated."""

    default_code = "domain_error"


class InvariantViolationError(DomainError):
    """An object was used in a way that would break one of its invariants."""

    default_code = "invariant_violation"


class ValidationError(DomainError):
    """Input data does not meet validation rules.

    ``errors`` is a list of field-level validation failures.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class InvalidInputError(ValidationError):
    """A required input (stream, algorithm, name) is absent or unusable."""

    default_code = "invalid_input"


class ConflictError(DomainError):
    """The operation conflicts with existing state."""

    default_code = "conflict"


class NameResolutionExhaustedError(ConflictError):
    """The name resolver did not yield a free name within the attempt ceiling."""

    default_code = "name_resolution_exhausted"

    def __init__(self, save_name: str, attempts: int, **kwargs: Any) -> None:
        super().__init__(
            f"No unique save name found for {save_name!r} after {attempts} attempts",
            detail={"save_name": save_name, "attempts": attempts},
            **kwargs,
        )
        self.save_name = save_name
        self.attempts = attempts


__all__ = [
    "ConflictError",
    "DomainError",
    "InvalidInputError",
    "InvariantViolationError",
    "NameResolutionExhaustedError",
    "ValidationError",
]
