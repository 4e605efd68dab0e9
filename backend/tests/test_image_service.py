"""
Snapbook Backend - Image Service Tests
=======================================

HEIC detection rules, format sniffing with Pillow, and HEIC → JPEG conversion
on images generated in the fixtures.
"""

import io
from unittest.mock import patch

import pytest
from PIL import Image

from app.exceptions import ImageConversionError, ValidationError
from app.services.image_service import ImageService, is_heic, is_image_upload


class TestHeicDetection:

    @pytest.mark.parametrize(
        "content_type, filename",
        [
            ("image/heic", "IMG_0001.jpg"),
            ("image/heif", None),
            ("IMAGE/HEIC", "x"),
            ("", "IMG_0001.HEIC"),
            (None, "photo.heif"),
            ("application/octet-stream", "photo.Heic"),
        ],
    )
    def test_detected(self, content_type, filename):
        assert is_heic(content_type, filename)

    @pytest.mark.parametrize(
        "content_type, filename",
        [
            ("image/jpeg", "photo.jpg"),
            ("image/png", "heic.png"),
            (None, None),
            ("", "photo.heic.jpg"),
        ],
    )
    def test_not_detected(self, content_type, filename):
        assert not is_heic(content_type, filename)

    def test_image_upload_prefilter(self):
        assert is_image_upload("image/webp", "a.webp")
        assert is_image_upload("", "a.HEIC")
        assert not is_image_upload("application/pdf", "a.pdf")
        assert not is_image_upload(None, "notes.txt")


class TestFormatDetection:

    def setup_method(self):
        self.service = ImageService()

    def test_jpeg(self, jpeg_bytes):
        fmt = self.service.detect_format(jpeg_bytes)
        assert fmt == "JPEG"

    def test_decompression_bomb_is_validation_error(self, png_bytes):
        # fixture PNG is 32x24, over twice this limit
        with patch.object(Image, "MAX_IMAGE_PIXELS", 100):
            with pytest.raises(ValidationError, match="too large"):
                self.service.detect_format(png_bytes)
        assert self.service.storage_extension(fmt) == ".jpg"

    def test_png(self, png_bytes):
        fmt = self.service.detect_format(png_bytes)
        assert fmt == "PNG"
        assert self.service.storage_extension(fmt) == ".png"

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError, match="not a valid image"):
            self.service.detect_format(b"definitely not an image")

    def test_unsupported_format_rejected(self):
        buf = io.BytesIO()
        Image.new("RGB", (4, 4)).save(buf, format="BMP")
        fmt = self.service.detect_format(buf.getvalue())
        with pytest.raises(ValidationError, match="not supported"):
            self.service.storage_extension(fmt)


class TestHeicConversion:

    def test_converts_to_jpeg(self, heic_bytes):
        service = ImageService(quality=85)

        jpeg = service.convert_heic_to_jpeg(heic_bytes)

        with Image.open(io.BytesIO(jpeg)) as image:
            assert image.format == "JPEG"
            assert image.size == (32, 24)

    def test_default_quality_from_settings(self):
        assert ImageService().quality == 85

    def test_corrupt_input_raises_conversion_error(self):
        with pytest.raises(ImageConversionError) as exc_info:
            ImageService().convert_heic_to_jpeg(b"\x00\x00\x00\x18ftypheic-broken")
        assert exc_info.value.message

    @pytest.mark.asyncio
    async def test_async_wrapper(self, heic_bytes):
        jpeg = await ImageService().convert_heic_to_jpeg_async(heic_bytes)
        assert jpeg[:2] == b"\xff\xd8"
