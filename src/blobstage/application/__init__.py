"""Application – use-case building blocks (framework-agnostic)."""

from blobstage.application.files import (
    BlobUploader,
    UploadBatch,
    UploadCandidate,
    UploadState,
    ensure_container,
)

__all__ = [
    "BlobUploader",
    "UploadBatch",
    "UploadCandidate",
    "UploadState",
    "ensure_container",
]
