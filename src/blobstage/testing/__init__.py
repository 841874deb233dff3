"""Testing support – blob store fakes and upload generators."""

from blobstage.testing.fakes import RecordingBlobStore
from blobstage.testing.generators import (
    file_name_strategy,
    image_bytes_gen,
    raw_upload_gen,
    raw_upload_strategy,
)

__all__ = [
    "RecordingBlobStore",
    "file_name_strategy",
    "image_bytes_gen",
    "raw_upload_gen",
    "raw_upload_strategy",
]
