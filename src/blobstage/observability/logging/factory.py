"""Observability – JsonLoggerFactory."""
from __future__ import annotations

import logging
from typing import Any, TextIO

import structlog

from blobstage.observability.logging.filters import SensitiveFieldsFilter

LIBRARY_LOGGER = "blobstage"


class BlobstageJsonHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Root handler installed by :class:`JsonLoggerFactory`.

    The subclass marks which root handler belongs to us, so reconfiguring
    replaces only this one and leaves the host application's handlers alone.
    """


class JsonLoggerFactory:
    """Configure structlog for JSON output through the stdlib logging bridge.

    Every blobstage module logs through ``get_logger(__name__)``, so all
    events land under the ``blobstage`` stdlib logger.  ``level`` applies to
    the root logger; ``library_level`` tunes the ``blobstage`` namespace on
    its own, e.g. ``DEBUG`` to see every rename while the host stays at
    ``INFO``.  Event dicts pass through :class:`SensitiveFieldsFilter` first
    unless ``redact`` is false, so credentials never reach the renderer.
    """

    @staticmethod
    def configure(
        level: int = logging.INFO,
        sensitive_fields: frozenset[str] | None = None,
        *,
        redact: bool = True,
        library_level: int | None = None,
        stream: TextIO | None = None,
    ) -> logging.Handler:
        """Install structlog and the JSON root handler; return the handler."""
        shared_processors: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]
        if redact:
            _filter = SensitiveFieldsFilter(sensitive_fields)

            def _redact(logger: Any, method: Any, event_dict: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG001
                return _filter.redact_deep(event_dict)

            shared_processors.insert(0, _redact)

        structlog.configure(
            processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        handler = BlobstageJsonHandler(stream)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )

        root = logging.getLogger()
        for existing in [h for h in root.handlers if isinstance(h, BlobstageJsonHandler)]:
            root.removeHandler(existing)
        root.addHandler(handler)
        root.setLevel(level)
        logging.getLogger(LIBRARY_LOGGER).setLevel(
            logging.NOTSET if library_level is None else library_level
        )
        return handler


__all__ = ["BlobstageJsonHandler", "JsonLoggerFactory", "LIBRARY_LOGGER"]
