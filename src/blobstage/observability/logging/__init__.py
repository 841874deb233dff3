"""Observability – structured logging helpers."""
from blobstage.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from blobstage.observability.logging.factory import LIBRARY_LOGGER, BlobstageJsonHandler, JsonLoggerFactory
from blobstage.observability.logging.processors import get_logger

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "LIBRARY_LOGGER",
    "BlobstageJsonHandler",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "get_logger",
]
