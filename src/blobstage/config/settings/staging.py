"""Config settings – staging and S3 connection settings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from blobstage.config.settings.base import Settings

DEFAULT_MAX_NAME_ATTEMPTS = 10_000


@dataclasses.dataclass
class StagingSettings(Settings):
    """How a batch is named, normalised and uploaded.

    Read from ``BLOBSTAGE_*`` environment variables, e.g.
    ``BLOBSTAGE_CONTAINER_NAME=user-photos``.
    """

    _prefix: ClassVar[str] = "BLOBSTAGE"

    container_name: str
    max_name_attempts: int = DEFAULT_MAX_NAME_ATTEMPTS
    max_concurrency: int = 1
    image_max_dimension: int | None = None
    image_quality: int = 85

    def _validate(self) -> None:
        if not self.container_name.strip():
            raise self._reject("container_name", "must not be blank")
        if self.max_name_attempts < 1:
            raise self._reject("max_name_attempts", "must be >= 1")
        if self.max_concurrency < 1:
            raise self._reject("max_concurrency", "must be >= 1")
        if self.image_max_dimension is not None and self.image_max_dimension < 1:
            raise self._reject("image_max_dimension", "must be >= 1 when set")
        if not 1 <= self.image_quality <= 95:
            raise self._reject("image_quality", "must be in 1..95")


@dataclasses.dataclass
class S3Settings(Settings):
    """Connection settings for an S3-compatible store (``BLOBSTAGE_S3_*``)."""

    _prefix: ClassVar[str] = "BLOBSTAGE_S3"
    _secret_fields: ClassVar[frozenset[str]] = frozenset({"aws_access_key_id", "aws_secret_access_key"})

    region_name: str | None = None
    endpoint_url: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    key_prefix: str = ""

    def _validate(self) -> None:
        if bool(self.aws_access_key_id) != bool(self.aws_secret_access_key):
            missing = "aws_secret_access_key" if self.aws_access_key_id else "aws_access_key_id"
            raise self._reject(missing, "access key id and secret access key must be set together")


__all__ = ["DEFAULT_MAX_NAME_ATTEMPTS", "S3Settings", "StagingSettings"]
