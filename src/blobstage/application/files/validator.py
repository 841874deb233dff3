"""Application files – upload validation rules and FileValidator."""
from __future__ import annotations

import dataclasses
import io
from typing import Callable, Iterable, Sequence, Union

from blobstage.application.files.candidate import (
    UploadSource,
    content_type_matches,
    extension_matches,
)
from blobstage.application.files.resolver import split_extension
from blobstage.kernel.errors import ValidationError

__all__ = [
    "FileValidationError",
    "FileValidator",
    "UploadRule",
    "ValidationResult",
    "declared_size",
    "file_size",
    "is_file_types",
]

UploadValue = Union[UploadSource, Sequence[Union[UploadSource, None]], None]
UploadRule = Callable[[UploadValue], bool]


@dataclasses.dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = dataclasses.field(default_factory=tuple)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True, errors=())

    @classmethod
    def fail(cls, *errors: str) -> "ValidationResult":
        return cls(valid=False, errors=errors)


class FileValidationError(ValidationError):
    """Raised by FileValidator when one or more uploads fail validation."""

    default_code = "file_validation_error"

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages), errors=[{"message": m} for m in messages])
        self.messages = messages


def declared_size(source: UploadSource) -> int:
    """Declared content length, or the stream length when none was declared."""
    if source.content_length is not None:
        return source.content_length
    if source.stream is None:
        return 0
    position = source.stream.tell()
    end = source.stream.seek(0, io.SEEK_END)
    source.stream.seek(position)
    return end


def _each(value: UploadValue) -> Iterable[UploadSource]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return (v for v in value if v is not None)
    return (value,)  # type: ignore[return-value]


def is_file_types(mimes: Sequence[str]) -> UploadRule:
    """Rule: every upload's content type contains every entry of *mimes*.

    Accepts a single upload, a list of uploads or ``None`` (valid).
    """
    allowed = tuple(mimes)

    def rule(value: UploadValue) -> bool:
        return all(content_type_matches(s.content_type, allowed) for s in _each(value))

    return rule


def file_size(max_bytes: int) -> UploadRule:
    """Rule: every upload is at most *max_bytes* long."""

    def rule(value: UploadValue) -> bool:
        return all(declared_size(s) <= max_bytes for s in _each(value))

    return rule


class FileValidator:
    """Validates uploads against size, content-type and extension constraints.

    The checks share :class:`UploadCandidate` semantics: ``content_types`` is
    conjunctive substring matching and ``extensions`` must match exactly.
    """

    def __init__(
        self,
        max_size_bytes: int | None = None,
        content_types: Sequence[str] | None = None,
        extensions: Sequence[str] | None = None,
    ) -> None:
        self.max_size_bytes = max_size_bytes
        self.content_types = tuple(content_types or ())
        self.extensions = tuple(extensions) if extensions is not None else None

    def validate(self, source: UploadSource) -> ValidationResult:
        errors: list[str] = []
        if source.stream is None:
            errors.append(f"File '{source.filename}' has no content stream")
        size = declared_size(source)
        if self.max_size_bytes is not None and size > self.max_size_bytes:
            errors.append(
                f"File '{source.filename}' size {size} bytes exceeds maximum of {self.max_size_bytes} bytes"
            )
        if not content_type_matches(source.content_type, self.content_types):
            errors.append(
                f"File '{source.filename}' content type '{source.content_type}' is not allowed. "
                f"Required: {', '.join(self.content_types)}"
            )
        if self.extensions is not None:
            extension = split_extension(source.filename)[1]
            if not extension_matches(extension, self.extensions):
                errors.append(
                    f"File '{source.filename}' extension '{extension}' is not allowed"
                )
        if errors:
            return ValidationResult.fail(*errors)
        return ValidationResult.ok()

    def validate_all(self, sources: Iterable[UploadSource]) -> ValidationResult:
        errors: list[str] = []
        for source in sources:
            errors.extend(self.validate(source).errors)
        if errors:
            return ValidationResult.fail(*errors)
        return ValidationResult.ok()

    def validate_or_raise(self, sources: Iterable[UploadSource]) -> None:
        result = self.validate_all(sources)
        if not result.valid:
            raise FileValidationError(list(result.errors))
