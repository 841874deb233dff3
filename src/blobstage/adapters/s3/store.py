"""S3 adapter – S3BlobStore and S3ContainerService (requires the 's3' extra)."""
from __future__ import annotations

import asyncio
import json
from typing import Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from blobstage.config.settings.staging import S3Settings
from blobstage.observability.logging import get_logger

__all__ = ["S3BlobStore", "S3ContainerService", "public_read_policy"]

logger = get_logger(__name__)

_MISSING_BUCKET_CODES = frozenset({"404", "NoSuchBucket", "NotFound"})
_DEFAULT_REGION = "us-east-1"


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _normalise_prefix(prefix: str) -> str:
    prefix = prefix.strip("/")
    return f"{prefix}/" if prefix else ""


def public_read_policy(bucket: str) -> dict[str, Any]:
    """Bucket policy letting anyone ``GetObject`` (but not list) in *bucket*."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "PublicReadGetObject",
                "Effect": "Allow",
                "Principal": "*",
                "Action": "s3:GetObject",
                "Resource": f"arn:aws:s3:::{bucket}/*",
            }
        ],
    }


class S3BlobStore:
    """One bucket (optionally below a key prefix) as a :class:`BlobStore`.

    Keys passed in and returned are relative to ``key_prefix``.
    """

    def __init__(self, client: Any, bucket: str, key_prefix: str = "") -> None:
        self._client = client
        self.bucket = bucket
        self.key_prefix = _normalise_prefix(key_prefix)

    def __repr__(self) -> str:
        return f"S3BlobStore(bucket={self.bucket!r}, key_prefix={self.key_prefix!r})"

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def list_keys(self, prefix: str = "") -> list[str]:
        paginator = self._client.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self._key(prefix)):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"][len(self.key_prefix):])
        return keys

    def put_stream(self, key: str, content_type: str, stream: BinaryIO) -> None:
        self._client.upload_fileobj(
            stream,
            self.bucket,
            self._key(key),
            ExtraArgs={"ContentType": content_type},
        )

    async def put_stream_async(self, key: str, content_type: str, stream: BinaryIO) -> None:
        # runs on the default executor; boto3 clients may be shared across threads
        await asyncio.to_thread(self.put_stream, key, content_type, stream)


class S3ContainerService:
    """Provisions buckets and hands out :class:`S3BlobStore` handles.

    The boto3 client is owned by the caller and shared only by the stores
    this service returns.
    """

    def __init__(self, client: Any, *, region_name: str | None = None, key_prefix: str = "") -> None:
        self._client = client
        self._region_name = region_name
        self._key_prefix = key_prefix

    @classmethod
    def from_settings(cls, settings: S3Settings) -> "S3ContainerService":
        kwargs: dict[str, Any] = {}
        if settings.aws_access_key_id:
            kwargs["aws_access_key_id"] = settings.aws_access_key_id
            kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        client = boto3.client(
            "s3",
            region_name=settings.region_name,
            endpoint_url=settings.endpoint_url,
            config=Config(signature_version="s3v4"),
            **kwargs,
        )
        logger.info("s3.client_configured", **settings.as_log_dict())
        return cls(client, region_name=settings.region_name, key_prefix=settings.key_prefix)

    def ensure_container(self, canonical_name: str) -> S3BlobStore:
        try:
            self._client.head_bucket(Bucket=canonical_name)
        except ClientError as exc:
            if _error_code(exc) not in _MISSING_BUCKET_CODES:
                raise
            self._create_bucket(canonical_name)
        return S3BlobStore(self._client, canonical_name, self._key_prefix)

    def _create_bucket(self, name: str) -> None:
        kwargs: dict[str, Any] = {"Bucket": name}
        if self._region_name and self._region_name != _DEFAULT_REGION:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self._region_name}
        try:
            self._client.create_bucket(**kwargs)
        except ClientError as exc:
            if _error_code(exc) != "BucketAlreadyOwnedByYou":
                raise
            # created by a concurrent caller between head_bucket and create_bucket
            logger.debug("s3.bucket_already_owned", bucket=name)
            return
        logger.info("s3.bucket_created", bucket=name, region=self._region_name)

    def set_public_read_access(self, container: S3BlobStore) -> None:
        self._client.delete_public_access_block(Bucket=container.bucket)
        self._client.put_bucket_policy(
            Bucket=container.bucket,
            Policy=json.dumps(public_read_policy(container.bucket)),
        )
