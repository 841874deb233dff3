"""Application files – upload candidates, unique-name batches and blob uploading."""
from blobstage.application.files.candidate import (
    DEFAULT_CONTENT_TYPE,
    RawUpload,
    Sizeable,
    UploadCandidate,
    UploadSource,
)
from blobstage.application.files.resolver import (
    NameResolver,
    resolve_save_name,
    split_extension,
    windows_style,
)
from blobstage.application.files.batch import CandidateFactory, UploadBatch
from blobstage.application.files.images import (
    ImageDimensions,
    ImageNormalizer,
    image_candidate,
    probe_image,
    scale_to_bound,
    scale_to_bounds,
)
from blobstage.application.files.store import (
    BlobStore,
    ContainerService,
    InMemoryBlobStore,
    InMemoryContainerService,
)
from blobstage.application.files.uploader import (
    BlobUploader,
    UploadState,
    container_name,
    ensure_container,
)
from blobstage.application.files.validator import (
    FileValidationError,
    FileValidator,
    UploadRule,
    ValidationResult,
    file_size,
    is_file_types,
)
from blobstage.application.files.service import BatchStagedEvent, StagingService

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "BatchStagedEvent",
    "BlobStore",
    "BlobUploader",
    "CandidateFactory",
    "ContainerService",
    "FileValidationError",
    "FileValidator",
    "ImageDimensions",
    "ImageNormalizer",
    "InMemoryBlobStore",
    "InMemoryContainerService",
    "NameResolver",
    "RawUpload",
    "Sizeable",
    "StagingService",
    "UploadBatch",
    "UploadCandidate",
    "UploadRule",
    "UploadSource",
    "UploadState",
    "ValidationResult",
    "container_name",
    "ensure_container",
    "file_size",
    "image_candidate",
    "is_file_types",
    "probe_image",
    "resolve_save_name",
    "scale_to_bound",
    "scale_to_bounds",
    "split_extension",
    "windows_style",
]
