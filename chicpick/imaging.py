"""Image compression applied before a photo is classified and stored."""

from __future__ import annotations

import base64
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

DATA_URL_PREFIX = "data:image/jpeg;base64,"


class ImageProcessingError(ValueError):
    """Raised when the uploaded bytes are not a supported image."""


def compress_image(raw: bytes, *, max_side: int = 800, quality: int = 70) -> str:
    """Downscale to ``max_side`` on the longer edge and return a JPEG data URL."""

    try:
        with Image.open(BytesIO(raw)) as img:
            img = ImageOps.exif_transpose(img)
            img = img.convert("RGB")
            img.thumbnail((max_side, max_side))
            buffer = BytesIO()
            img.save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ImageProcessingError("Failed to process image") from exc
    return DATA_URL_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


def strip_data_url(image: str) -> str:
    """Return the base64 payload of a data URL, or the input unchanged."""

    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image
