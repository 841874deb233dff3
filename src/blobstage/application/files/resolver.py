"""Application files – save-name resolvers.

A resolver maps ``(base_name, attempt)`` to a replacement base name.  It never
sees the extension or the directory part of a key; :func:`resolve_save_name`
strips both before the call and re-attaches them afterwards.

A resolver must yield infinitely many distinct names over increasing
attempts (embedding the counter is the usual way).  One that can only return
finitely many values makes resolution stop with
:class:`~blobstage.kernel.errors.NameResolutionExhaustedError` once the
owning batch's attempt ceiling is reached.
"""
from __future__ import annotations

from typing import Callable

__all__ = ["NameResolver", "resolve_save_name", "split_extension", "windows_style"]

NameResolver = Callable[[str, int], str]

_SEPARATORS = ("/", "\\")


def windows_style(base: str, attempt: int) -> str:
    """``report`` + 2 → ``report (2)``, the way Explorer names copies."""
    return f"{base} ({attempt})"


def split_extension(name: str) -> tuple[str, str]:
    """Split *name* into ``(everything before the extension, extension)``.

    The extension starts at the last ``.`` of the final path segment and
    includes it; it is ``""`` when that segment has no dot.

    >>> split_extension("photos/cat.tar.gz")
    ('photos/cat.tar', '.gz')
    >>> split_extension("v1.2/README")
    ('v1.2/README', '')
    """
    segment_start = max(name.rfind(sep) for sep in _SEPARATORS) + 1
    dot = name.rfind(".", segment_start)
    if dot == -1:
        return name, ""
    return name[:dot], name[dot:]


def resolve_save_name(name: str, attempt: int, resolver: NameResolver) -> str:
    """Apply *resolver* to the bare file name of *name*, keeping directory and extension."""
    stem, extension = split_extension(name)
    segment_start = max(stem.rfind(sep) for sep in _SEPARATORS) + 1
    directory, base = stem[:segment_start], stem[segment_start:]
    return f"{directory}{resolver(base, attempt)}{extension}"
