"""Application files – image probing and bounded, aspect-preserving scaling (Pillow)."""
from __future__ import annotations

import dataclasses
import io
import math
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from blobstage.application.files.candidate import UploadCandidate, UploadSource
from blobstage.kernel.errors import InvalidInputError

__all__ = [
    "ImageDimensions",
    "ImageNormalizer",
    "image_candidate",
    "probe_image",
    "scale_to_bound",
    "scale_to_bounds",
]

OUTPUT_FORMAT = "JPEG"
OUTPUT_CONTENT_TYPE = "image/jpeg"


@dataclasses.dataclass(frozen=True)
class ImageDimensions:
    """Pixel size of a decoded image."""

    width: int
    height: int

    def smaller_than(self, height: int, width: int | None = None) -> bool:
        """True when both sides fit: ``width <= bound`` and ``height <= bound``.

        With a single argument the same bound applies to both sides.
        """
        max_width = height if width is None else width
        return self.width <= max_width and self.height <= height

    def larger_than(self, height: int, width: int | None = None) -> bool:
        """True when either side reaches its bound."""
        min_width = height if width is None else width
        return self.width >= min_width or self.height >= height


def probe_image(stream: BinaryIO) -> ImageDimensions | None:
    """Read the image header from *stream*; ``None`` when it is not an image.

    The stream is rewound to 0 afterwards in both cases.
    """
    stream.seek(0)
    try:
        with Image.open(stream) as img:
            return ImageDimensions(width=img.width, height=img.height)
    except UnidentifiedImageError:
        return None
    finally:
        stream.seek(0)


def image_candidate(source: UploadSource, save_name: str | None = None) -> UploadCandidate:
    """Candidate factory that attaches :class:`ImageDimensions` when the upload decodes."""
    candidate = UploadCandidate.from_upload(source, save_name)
    candidate.image = probe_image(candidate.stream)
    return candidate


def _scaled_size(width: int, height: int, max_height: int, max_width: int) -> tuple[int, int]:
    ratio = max(width / max_width, height / max_height)
    return max(1, math.floor(width / ratio)), max(1, math.floor(height / ratio))


def scale_to_bounds(
    stream: BinaryIO,
    max_height: int,
    max_width: int,
    *,
    quality: int = 85,
) -> io.BytesIO:
    """Re-encode the first frame of *stream* as JPEG, scaled to fit the bounds.

    ``ratio = max(width / max_width, height / max_height)`` and each side is
    ``floor(side / ratio)``, so the aspect ratio is kept and neither side
    exceeds its bound.  Images smaller than the bounds are scaled up.

    The source is read from offset 0 and left open; the returned stream is
    positioned at 0.
    """
    if max_height < 1 or max_width < 1:
        raise InvalidInputError(
            "Scaling bounds must be positive",
            detail={"max_height": max_height, "max_width": max_width},
        )
    stream.seek(0)
    with Image.open(stream) as img:
        img.seek(0)
        size = _scaled_size(img.width, img.height, max_height, max_width)
        frame = img.convert("RGB") if img.mode != "RGB" else img
        resized = frame.resize(size, Image.Resampling.LANCZOS)

    out = io.BytesIO()
    resized.save(out, format=OUTPUT_FORMAT, quality=quality)
    out.seek(0)
    return out


def scale_to_bound(stream: BinaryIO, max_dimension: int, *, quality: int = 85) -> io.BytesIO:
    """:func:`scale_to_bounds` with the same bound for height and width."""
    return scale_to_bounds(stream, max_dimension, max_dimension, quality=quality)


class ImageNormalizer:
    """Scales oversized image candidates down to a bounding box before upload.

    Candidates without image metadata, and images that already fit the box,
    pass through untouched with their own content type.  A scaled image is
    uploaded as ``image/jpeg`` under its unchanged save name, so ``cat.png``
    may hold JPEG data; choose a ``name_transform`` that swaps the extension
    when that matters.
    """

    def __init__(self, max_height: int, max_width: int | None = None, *, quality: int = 85) -> None:
        self.max_height = max_height
        self.max_width = max_height if max_width is None else max_width
        self.quality = quality

    def normalize(self, candidate: UploadCandidate) -> tuple[BinaryIO, str]:
        """Return ``(stream, content_type)`` to upload for *candidate*."""
        image = candidate.image
        if image is None or image.smaller_than(self.max_height, self.max_width):
            return candidate.stream, candidate.content_type
        scaled = scale_to_bounds(
            candidate.stream,
            self.max_height,
            self.max_width,
            quality=self.quality,
        )
        return scaled, OUTPUT_CONTENT_TYPE
