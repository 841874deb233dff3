"""Infrastructure errors – I/O failures against the blob store."""

from __future__ import annotations

from typing import Any

from blobstage.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class UploadFailedError(InfrastructureError):
    """Writing one candidate to the store failed; the rest of the batch was skipped."""

    default_code = "upload_failed"

    def __init__(
        self,
        save_name: str,
        cause: BaseException,
        *,
        uploaded: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Upload of {save_name!r} failed: {cause}",
            detail={"save_name": save_name, "uploaded": list(uploaded or [])},
            cause=cause,
            **kwargs,
        )
        self.save_name = save_name
        self.uploaded: list[str] = list(uploaded or [])


__all__ = ["InfrastructureError", "UploadFailedError"]
