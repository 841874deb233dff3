"""Testing fakes – in-memory doubles for storage ports."""
from blobstage.application.files.store import InMemoryBlobStore, InMemoryContainerService
from blobstage.testing.fakes.blob_store import RecordingBlobStore

__all__ = ["InMemoryBlobStore", "InMemoryContainerService", "RecordingBlobStore"]
