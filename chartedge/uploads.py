"""
Chart upload validation.

All checks run before any call to the model: presence, declared content type,
size ceiling, and finally that Pillow can actually decode the bytes.
"""

import io
import logging
import warnings
from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from .errors import (
    ImageDimensionsError,
    ImageTooLargeError,
    InvalidImageError,
    MissingImageError,
    UnsupportedImageTypeError,
)

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ("image/png", "image/jpeg")

# Pillow format name -> MIME type sent to the model
FORMAT_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
}


@dataclass(frozen=True)
class ChartImage:
    data: bytes
    mime_type: str
    width: int
    height: int
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


def check_content_type(content_type: Optional[str]) -> str:
    if content_type not in ALLOWED_MIME_TYPES:
        logger.info(f"Rejected upload with content type {content_type!r}")
        raise UnsupportedImageTypeError()
    return content_type


def inspect_image(data: bytes) -> ChartImage:
    """Decode just enough of the image to learn its format and size."""
    try:
        with warnings.catch_warnings():
            # Pillow warns past MAX_IMAGE_PIXELS and raises past twice that
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
                width, height = image.size
                image.verify()
    except (Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
        logger.info(f"Rejected oversized image: {e}")
        raise ImageDimensionsError() from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.info(f"Rejected undecodable upload: {e}")
        raise InvalidImageError() from e

    mime_type = FORMAT_MIME_TYPES.get(image_format)
    if mime_type is None:
        logger.info(f"Rejected upload decoded as {image_format}")
        raise UnsupportedImageTypeError()
    return ChartImage(data=data, mime_type=mime_type, width=width, height=height)


async def read_chart_upload(upload: Optional[UploadFile], max_bytes: int) -> ChartImage:
    """Validate a multipart chart upload and buffer it in memory.

    Raises:
        MissingImageError: no file part, or an empty one without a filename
        UnsupportedImageTypeError: declared type is not PNG/JPEG
        ImageTooLargeError: more than ``max_bytes`` bytes
        InvalidImageError: bytes are not a decodable PNG/JPEG
    """
    if upload is None:
        raise MissingImageError()

    data = await upload.read(max_bytes + 1)
    if not data and not upload.filename:
        raise MissingImageError()

    declared = check_content_type(upload.content_type)

    if len(data) > max_bytes:
        logger.info(f"Rejected upload {upload.filename!r}: larger than {max_bytes} bytes")
        raise ImageTooLargeError()

    chart = inspect_image(data)
    if chart.mime_type != declared:
        # Trust the bytes over the browser's guess
        logger.debug(f"Declared {declared} but decoded as {chart.mime_type}")

    return ChartImage(
        data=chart.data,
        mime_type=chart.mime_type,
        width=chart.width,
        height=chart.height,
        filename=upload.filename,
    )
