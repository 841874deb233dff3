"""Testing generators – random uploads and Hypothesis strategies."""
from blobstage.testing.generators.upload_gen import image_bytes_gen, raw_upload_gen
from blobstage.testing.generators.strategies import file_name_strategy, raw_upload_strategy

__all__ = [
    "file_name_strategy",
    "image_bytes_gen",
    "raw_upload_gen",
    "raw_upload_strategy",
]
