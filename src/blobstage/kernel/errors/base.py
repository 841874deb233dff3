"""Root error class for the blobstage error hierarchy."""

from __future__ import annotations

import json
from typing import Any


class BaseError(Exception):
    """Root of every error blobstage raises on purpose.

    ``code`` is the stable slug HTTP adapters and log queries key on;
    ``detail`` carries the names and counts involved (save names, attempt
    ceilings, setting keys) and must stay JSON-serialisable.  A *cause* is
    chained as ``__cause__`` so tracebacks show the store or codec failure
    underneath.

    Three renderings exist: ``str(err)`` reads ``"<code>: <message>"``,
    :meth:`to_dict` / :meth:`to_json` give the response body, and
    :meth:`log_fields` gives the structlog keyword arguments.
    """

    default_code: str = "base_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = dict(detail or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Response body: ``code``, ``message``, ``detail`` and ``cause`` when chained."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def log_fields(self) -> dict[str, Any]:
        """Keyword arguments for a structlog call, namespaced under ``error_*``.

        >>> BaseError("boom", detail={"key": "a.txt"}).log_fields()
        {'error_code': 'base_error', 'error_message': 'boom', 'error_detail': {'key': 'a.txt'}}
        """
        fields: dict[str, Any] = {
            "error_code": self.code,
            "error_message": self.message,
            "error_detail": self.detail,
        }
        if self.cause is not None:
            fields["error_cause"] = repr(self.cause)
        return fields


__all__ = ["BaseError"]
