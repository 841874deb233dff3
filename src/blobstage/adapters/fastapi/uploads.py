"""FastAPI adapter – turn ``UploadFile`` objects into :class:`RawUpload` sources."""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable

from fastapi import File, HTTPException, UploadFile

from blobstage.application.files.candidate import DEFAULT_CONTENT_TYPE, RawUpload
from blobstage.application.files.validator import FileValidator

__all__ = ["upload_rules_dep", "upload_source", "upload_sources"]


def upload_source(file: UploadFile) -> RawUpload:
    """Wrap a Starlette/FastAPI ``UploadFile`` without copying its content."""
    return RawUpload(
        stream=file.file,
        filename=file.filename or "",
        content_type=file.content_type or DEFAULT_CONTENT_TYPE,
        content_length=file.size,
    )


def upload_sources(files: Iterable[UploadFile | None]) -> list[RawUpload]:
    return [upload_source(f) for f in files if f is not None]


def upload_rules_dep(validator: FileValidator) -> Callable[..., Awaitable[list[RawUpload]]]:
    """Return a dependency reading the ``files`` form field and validating it.

    Usage::

        rules = upload_rules_dep(FileValidator(max_size_bytes=5_000_000, content_types=["image/"]))

        @app.post("/photos")
        async def upload(sources: list[RawUpload] = Depends(rules)) -> dict[str, Any]: ...

    Invalid uploads are rejected with HTTP 422 and the validator's messages.
    """

    async def dep(files: list[UploadFile] = File(...)) -> list[RawUpload]:
        sources = upload_sources(files)
        result = validator.validate_all(sources)
        if not result.valid:
            detail: Any = list(result.errors)
            raise HTTPException(status_code=422, detail=detail)
        return sources

    return dep
