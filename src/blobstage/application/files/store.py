"""Application files – BlobStore / ContainerService ports and in-memory fakes."""
from __future__ import annotations

import asyncio
from typing import BinaryIO, Protocol, runtime_checkable

__all__ = [
    "BlobStore",
    "ContainerService",
    "InMemoryBlobStore",
    "InMemoryContainerService",
]


@runtime_checkable
class BlobStore(Protocol):
    """Port: one container of a flat key → blob namespace."""

    def list_keys(self, prefix: str = "") -> list[str]:
        """Return every key under *prefix* (no pagination left to the caller)."""
        ...

    def put_stream(self, key: str, content_type: str, stream: BinaryIO) -> None:
        """Write *stream* to *key*, overwriting any existing blob."""
        ...

    async def put_stream_async(self, key: str, content_type: str, stream: BinaryIO) -> None: ...


@runtime_checkable
class ContainerService(Protocol):
    """Port: provisions containers (buckets) and hands out :class:`BlobStore` handles.

    Implementations wrap a caller-owned SDK client; nothing is cached at
    module level.
    """

    def ensure_container(self, canonical_name: str) -> BlobStore:
        """Create the container if it does not exist yet; idempotent."""
        ...

    def set_public_read_access(self, container: BlobStore) -> None:
        """Allow anonymous reads of individual blobs in *container*."""
        ...


class InMemoryBlobStore:
    """Fake BlobStore for unit tests and local runs."""

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self.public_read = False
        self._blobs: dict[str, bytes] = {}
        self._content_types: dict[str, str] = {}

    def list_keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._blobs if key.startswith(prefix)]

    def put_stream(self, key: str, content_type: str, stream: BinaryIO) -> None:
        self._blobs[key] = stream.read()
        self._content_types[key] = content_type

    async def put_stream_async(self, key: str, content_type: str, stream: BinaryIO) -> None:
        await asyncio.sleep(0)
        self.put_stream(key, content_type, stream)

    def get(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    def content_type(self, key: str) -> str | None:
        return self._content_types.get(key)


class InMemoryContainerService:
    """Fake ContainerService keeping one :class:`InMemoryBlobStore` per name."""

    def __init__(self) -> None:
        self.containers: dict[str, InMemoryBlobStore] = {}

    def ensure_container(self, canonical_name: str) -> InMemoryBlobStore:
        container = self.containers.get(canonical_name)
        if container is None:
            container = InMemoryBlobStore(canonical_name)
            self.containers[canonical_name] = container
        return container

    def set_public_read_access(self, container: BlobStore) -> None:
        if not isinstance(container, InMemoryBlobStore):
            raise TypeError(f"Not a container of this service: {container!r}")
        container.public_read = True
