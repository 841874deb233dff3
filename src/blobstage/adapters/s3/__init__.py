"""S3 adapter – BlobStore and ContainerService over a caller-owned boto3 client."""
from blobstage.adapters.s3.store import S3BlobStore, S3ContainerService, public_read_policy

__all__ = ["S3BlobStore", "S3ContainerService", "public_read_policy"]
