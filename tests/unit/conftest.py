"""Shared fixtures for unit tests.

``restore_logging`` undoes whatever :class:`JsonLoggerFactory` installed;
``json_logs`` configures it at DEBUG into an in-memory buffer and returns a
callable that parses the emitted JSON lines.
"""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest
import structlog

from blobstage.observability.logging import LIBRARY_LOGGER, JsonLoggerFactory


@pytest.fixture
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    library = logging.getLogger(LIBRARY_LOGGER)
    handlers, level, library_level = list(root.handlers), root.level, library.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
    library.setLevel(library_level)


@pytest.fixture
def json_logs(restore_logging: None) -> Callable[[], list[dict[str, Any]]]:
    buffer = io.StringIO()
    JsonLoggerFactory.configure(logging.DEBUG, stream=buffer)

    def events() -> list[dict[str, Any]]:
        return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]

    return events
