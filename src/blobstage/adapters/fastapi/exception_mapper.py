"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable

from fastapi.responses import JSONResponse

from blobstage.kernel.errors import (
    BaseError,
    ConflictError,
    DomainError,
    InfrastructureError,
    UploadFailedError,
    ValidationError,
)


class FastAPIExceptionMapper:
    """Register blobstage error → HTTP status-code mappings on a FastAPI app.

    Error body schema::

        {"code": "upload_failed", "message": "...", "detail": {...}}

    Mappings
    --------
    ``ValidationError``     → 400
    ``ConflictError``       → 409
    ``UploadFailedError``   → 502
    ``InfrastructureError`` → 503
    ``DomainError``         → 422
    """

    def __init__(self) -> None:
        self._map: list[tuple[type[Exception], int]] = [
            (ValidationError, 400),
            (ConflictError, 409),
            (UploadFailedError, 502),
            (InfrastructureError, 503),
            (DomainError, 422),
        ]

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""
        for exc_type, status in self._map:
            app.add_exception_handler(exc_type, self._handler(status))

    @staticmethod
    def _handler(code: int) -> Callable[[Any, Any], Any]:
        def handler(request: Any, exc: Any) -> Any:  # noqa: ARG001
            if isinstance(exc, BaseError):
                body = exc.to_dict()
            else:
                body = {"code": "error", "message": str(exc)}
            return JSONResponse(status_code=code, content=body)

        return handler


__all__ = ["FastAPIExceptionMapper"]
