"""
blobstage – stage batches of uploaded files for blob storage.

Import path convention::

    from blobstage.application.files import UploadBatch, UploadCandidate
    from blobstage.application.files import BlobUploader, ensure_container
    from blobstage.adapters.s3 import S3ContainerService
    from blobstage.kernel.errors import UploadFailedError
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
