"""
Snapbook Backend - Image Inspection and HEIC Conversion
========================================================

What:  Decides whether an upload is an image, detects its real format, and
       converts HEIC/HEIF photos (the iPhone camera default) to JPEG.
How:   Pillow with the pillow-heif plugin registered as an opener. Decoding
       is CPU-bound, so the async wrappers run it in Starlette's threadpool.
Who:   PhotoService (batch uploads) and the standalone /api/convert-heic route.

HEIC detection:
    A file is treated as HEIC when EITHER its declared content type is
    image/heic or image/heif, OR its extension is .heic/.heif. Browsers often
    send an empty or generic content type for HEIC files, so the extension
    alone is enough.
"""

import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.exceptions import ImageConversionError, ValidationError

logger = logging.getLogger(__name__)

register_heif_opener()

HEIC_MIME_TYPES = {"image/heic", "image/heif"}
HEIC_EXTENSIONS = {".heic", ".heif"}

# Pillow format name → stored file extension. HEIF is never stored as-is.
STORABLE_FORMATS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
}


def is_heic(content_type: Optional[str], filename: Optional[str]) -> bool:
    """True when the declared type or the extension says HEIC/HEIF (case-insensitive)."""
    declared = (content_type or "").lower()
    if declared in HEIC_MIME_TYPES:
        return True
    ext = Path(filename or "").suffix.lower()
    return ext in HEIC_EXTENSIONS


def is_image_upload(content_type: Optional[str], filename: Optional[str]) -> bool:
    """Cheap pre-filter: any image/* declaration, or something that looks like HEIC."""
    declared = (content_type or "").lower()
    return declared.startswith("image/") or is_heic(content_type, filename)


class ImageService:
    """
    Stateless wrapper around Pillow.

    Attributes:
        quality: JPEG quality used for HEIC conversion (Pillow scale, 1-95).
    """

    def __init__(self, quality: Optional[int] = None):
        self.quality = quality or settings.heic_jpeg_quality

    def detect_format(self, content: bytes) -> str:
        """
        Returns the Pillow format name of `content` (e.g. "JPEG", "HEIF").

        Raises:
            ValidationError: the bytes are not an image Pillow can identify, or
            its pixel count is over Pillow's decompression bomb limit.
        """
        try:
            with Image.open(io.BytesIO(content)) as image:
                fmt = image.format
                image.verify()
        except Image.DecompressionBombError as e:
            raise ValidationError(
                message="Image dimensions are too large.",
                field="files",
                context={"error": str(e)},
            )
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise ValidationError(
                message="File is not a valid image.",
                field="files",
                context={"error": str(e)},
            )
        if not fmt:
            raise ValidationError(message="File is not a valid image.", field="files")
        return fmt

    def storage_extension(self, fmt: str) -> str:
        """Maps a detected format to the extension it is stored under."""
        ext = STORABLE_FORMATS.get(fmt.upper())
        if ext is None:
            raise ValidationError(
                message=(
                    f"Image format '{fmt}' is not supported. "
                    f"Allowed: {', '.join(sorted(STORABLE_FORMATS))}, HEIC"
                ),
                field="files",
                context={"format": fmt},
            )
        return ext

    def convert_heic_to_jpeg(self, content: bytes) -> bytes:
        """
        Decodes a HEIC/HEIF image and re-encodes it as JPEG.

        Multi-image HEIC containers (bursts, live photos) yield the primary
        image only.

        Raises:
            ImageConversionError: decoding or encoding failed; the message is
            the decoder's own error text.
        """
        try:
            with Image.open(io.BytesIO(content)) as image:
                rgb = image.convert("RGB")
            output = io.BytesIO()
            rgb.save(output, format="JPEG", quality=self.quality)
        except Exception as e:
            logger.warning("HEIC conversion failed (%d bytes): %s", len(content), e)
            raise ImageConversionError(
                message=str(e) or type(e).__name__,
                context={"size": len(content), "error_type": type(e).__name__},
            )

        jpeg = output.getvalue()
        logger.info(
            "Converted HEIC to JPEG: %d → %d bytes (quality=%d)",
            len(content),
            len(jpeg),
            self.quality,
        )
        return jpeg

    async def convert_heic_to_jpeg_async(self, content: bytes) -> bytes:
        return await run_in_threadpool(self.convert_heic_to_jpeg, content)

    async def detect_format_async(self, content: bytes) -> str:
        return await run_in_threadpool(self.detect_format, content)


image_service = ImageService()
