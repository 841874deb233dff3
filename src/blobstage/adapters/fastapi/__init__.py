"""FastAPI adapter – UploadFile conversion, validation dependency, error mapping."""
from blobstage.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from blobstage.adapters.fastapi.uploads import upload_rules_dep, upload_source, upload_sources

__all__ = [
    "FastAPIExceptionMapper",
    "upload_rules_dep",
    "upload_source",
    "upload_sources",
]
