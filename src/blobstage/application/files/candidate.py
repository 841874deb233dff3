"""Application files – UploadCandidate and the raw-input ports it is built from."""
from __future__ import annotations

import dataclasses
import hashlib
import io
from typing import BinaryIO, Protocol, Sequence, runtime_checkable

from blobstage.application.files.resolver import split_extension
from blobstage.kernel.errors import InvalidInputError, InvariantViolationError

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "DIGEST_ALGORITHMS",
    "RawUpload",
    "Sizeable",
    "UploadCandidate",
    "UploadSource",
    "content_type_matches",
    "extension_matches",
]

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DIGEST_ALGORITHMS: tuple[str, ...] = ("md5", "sha1", "sha256")

_CHUNK_SIZE = 64 * 1024


@runtime_checkable
class UploadSource(Protocol):
    """Port: one file as handed over by a request-handling framework."""

    stream: BinaryIO | None
    filename: str
    content_length: int | None
    content_type: str


@runtime_checkable
class Sizeable(Protocol):
    """Anything with pixel dimensions."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...


@dataclasses.dataclass
class RawUpload:
    """Plain :class:`UploadSource` implementation."""

    stream: BinaryIO | None
    filename: str
    content_type: str = DEFAULT_CONTENT_TYPE
    content_length: int | None = None

    @classmethod
    def from_bytes(cls, filename: str, content_type: str, data: bytes) -> "RawUpload":
        return cls(
            stream=io.BytesIO(data),
            filename=filename,
            content_type=content_type,
            content_length=len(data),
        )


def content_type_matches(content_type: str, allowed: Sequence[str]) -> bool:
    """True when *content_type* contains every entry of *allowed*; empty *allowed* is no restriction."""
    if allowed:
        return all(mime in content_type for mime in allowed)
    return True


def extension_matches(extension: str, allowed: Sequence[str]) -> bool:
    """True when *extension* equals every entry of *allowed*; empty *allowed* matches nothing."""
    if allowed:
        return all(extension == ext for ext in allowed)
    return False


def _measure(stream: BinaryIO) -> int:
    position = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(position)
    return end


class UploadCandidate:
    """One incoming file: its stream, names, size, type and cached digests.

    ``save_name`` starts as ``original_name`` (or the explicit *save_name*)
    and may be changed freely until the candidate joins an
    :class:`~blobstage.application.files.batch.UploadBatch`; from then on only
    the batch renames it.

    Digests are computed at most once per algorithm.  Computing one reads the
    stream from offset 0 and rewinds it to 0 afterwards.  A cached digest is
    returned without touching the stream, so callers that have read the
    stream since must call :meth:`rewind` themselves.
    """

    def __init__(
        self,
        stream: BinaryIO | None,
        original_name: str,
        content_length: int | None = None,
        content_type: str | None = DEFAULT_CONTENT_TYPE,
        save_name: str | None = None,
        *,
        image: Sizeable | None = None,
    ) -> None:
        if stream is None:
            raise InvalidInputError(
                "An upload candidate needs a source stream",
                detail={"original_name": original_name},
            )
        self._stream = stream
        self.original_name = original_name
        self.size_bytes = _measure(stream) if content_length is None else content_length
        self.content_type = content_type or DEFAULT_CONTENT_TYPE
        self.extension = split_extension(original_name)[1]
        self.image = image
        self._save_name = original_name if save_name is None else save_name
        self._owner: object | None = None
        self._digests: dict[str, bytes] = {}

    @classmethod
    def from_upload(cls, source: UploadSource, save_name: str | None = None) -> "UploadCandidate":
        """Build a candidate from a framework-supplied upload."""
        return cls(
            source.stream,
            source.filename,
            source.content_length,
            source.content_type,
            save_name,
        )

    def __repr__(self) -> str:
        return (
            f"UploadCandidate(original_name={self.original_name!r}, "
            f"save_name={self._save_name!r}, size_bytes={self.size_bytes})"
        )

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    @property
    def save_name(self) -> str:
        return self._save_name

    @save_name.setter
    def save_name(self, value: str) -> None:
        if self._owner is not None:
            raise InvariantViolationError(
                "save_name is managed by the owning batch once the candidate is added",
                detail={"save_name": self._save_name, "requested": value},
            )
        self._save_name = value

    def _claim(self, owner: object, save_name: str, *, rename: bool = False) -> None:
        if self._owner is not None and not (rename and self._owner is owner):
            raise InvariantViolationError(
                "Candidate already belongs to a batch",
                detail={"save_name": self._save_name},
            )
        self._owner = owner
        self._save_name = save_name

    # ------------------------------------------------------------------
    # Stream
    # ------------------------------------------------------------------

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    @property
    def closed(self) -> bool:
        return bool(getattr(self._stream, "closed", False))

    def rewind(self) -> None:
        self._stream.seek(0)

    def close(self) -> None:
        """Release the source stream.  Safe to call more than once."""
        if not self.closed:
            self._stream.close()

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def within_size(self, max_bytes: int) -> bool:
        return self.size_bytes <= max_bytes

    def has_content_type(self, allowed: Sequence[str]) -> bool:
        """True when the content type contains *every* entry of *allowed*.

        No entries means no restriction, so an empty *allowed* is always
        ``True``.  With several entries the check is conjunctive: ``["image/"]``
        matches ``image/png`` while ``["image/png", "image/jpeg"]`` matches
        nothing realistic.
        """
        return content_type_matches(self.content_type, allowed)

    def has_extension(self, allowed: Sequence[str]) -> bool:
        """True when the extension (with its dot) equals every entry of *allowed*.

        An empty *allowed* matches nothing and returns ``False``.
        """
        return extension_matches(self.extension, allowed)

    # ------------------------------------------------------------------
    # Digests
    # ------------------------------------------------------------------

    def digest(self, algorithm: str = "md5") -> bytes:
        key = algorithm.lower()
        if key not in DIGEST_ALGORITHMS:
            raise InvalidInputError(
                f"Unsupported digest algorithm {algorithm!r}",
                detail={"supported": list(DIGEST_ALGORITHMS)},
            )
        cached = self._digests.get(key)
        if cached is not None:
            return cached

        hasher = hashlib.new(key, usedforsecurity=False)
        self._stream.seek(0)
        for chunk in iter(lambda: self._stream.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
        self._stream.seek(0)

        value = hasher.digest()
        self._digests[key] = value
        return value

    def hexdigest(self, algorithm: str = "md5") -> str:
        return self.digest(algorithm).hex()

    def md5(self) -> bytes:
        return self.digest("md5")

    def sha1(self) -> bytes:
        return self.digest("sha1")
