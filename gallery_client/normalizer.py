"""Photo normalization for the design gallery.

Any raster image Pillow can decode is resampled so its longer side is at
most 800 px and re-encoded as JPEG (quality 70). The result is returned as a
``data:image/jpeg;base64,...`` string ready to be stored inline with a design.
Images already inside the bound keep their size but still go through the
encoder.

Sources may be up to ``MAX_SOURCE_PIXELS`` pixels. JPEG sources are scaled
down by the decoder itself (``Image.draft``), so a 200 MP camera photo never
exists at full size in memory; other formats are decoded at full size.
"""
import asyncio
import base64
import io
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

MAX_IMAGE_SIZE = 800
JPEG_QUALITY = 70
OUTPUT_MEDIA_TYPE = "image/jpeg"

# 16384 x 16384. Larger sources are refused rather than decoded.
MAX_SOURCE_PIXELS = 16384 * 16384

# Pillow only raises DecompressionBombError above twice this value, so its
# own check never fires before MAX_SOURCE_PIXELS is enforced below.
Image.MAX_IMAGE_PIXELS = MAX_SOURCE_PIXELS

# Modes the bicubic resampler handles directly
_RESAMPLE_MODES = ("L", "LA", "RGB", "RGBA")


class ImageDecodeError(Exception):
    """The source could not be decoded, resampled or encoded."""


@dataclass(frozen=True)
class NormalizedImage:
    data_url: str
    width: int
    height: int


def is_image_media_type(media_type: Optional[str]) -> bool:
    """Callers check this before normalizing; the normalizer does not sniff."""
    return bool(media_type) and media_type.lower().startswith("image/")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def target_size(width: int, height: int, max_size: int = MAX_IMAGE_SIZE) -> Tuple[int, int]:
    """Clamp the longer side to max_size, keeping the aspect ratio."""
    if width <= max_size and height <= max_size:
        return width, height
    if width > height:
        return max_size, max(1, _round_half_up(height * max_size / width))
    return max(1, _round_half_up(width * max_size / height)), max_size


def _resample_mode(img: Image.Image) -> str:
    if img.mode in _RESAMPLE_MODES:
        return img.mode
    if img.mode == "1":
        return "L"
    if img.mode == "PA" or (img.mode == "P" and "transparency" in img.info):
        return "RGBA"
    return "RGB"


def _resample(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Bicubic resize to size; always returns a new image."""
    mode = _resample_mode(img)
    if mode == img.mode:
        return img.copy() if img.size == size else img.resize(size, Image.Resampling.BICUBIC)
    working = img.convert(mode)
    if working.size == size:
        return working
    try:
        return working.resize(size, Image.Resampling.BICUBIC)
    finally:
        working.close()


def _flatten(img: Image.Image) -> Image.Image:
    """JPEG has no alpha: composite transparent images on white."""
    if img.mode in ("RGBA", "LA"):
        rgba = img.convert("RGBA") if img.mode == "LA" else img
        try:
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
        finally:
            if rgba is not img:
                rgba.close()
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def _normalize_sync(data: bytes) -> NormalizedImage:
    buffer = io.BytesIO(data)
    try:
        with Image.open(buffer) as source:
            width, height = target_size(*source.size)
            if source.size[0] * source.size[1] > MAX_SOURCE_PIXELS:
                raise ImageDecodeError(
                    f"Invalid image: {source.size[0]}x{source.size[1]} exceeds {MAX_SOURCE_PIXELS} pixels"
                )
            if source.format == "JPEG":
                # decode at the smallest DCT scale still covering the target
                source.draft("RGB", (width, height))
            # decode
            source.load()
            # resample
            resized = _resample(source, (width, height))
            try:
                rgb = _flatten(resized)
                try:
                    # encode
                    output = io.BytesIO()
                    rgb.save(output, format="JPEG", quality=JPEG_QUALITY)
                    encoded = base64.b64encode(output.getvalue()).decode("ascii")
                    output.close()
                finally:
                    if rgb is not resized:
                        rgb.close()
            finally:
                resized.close()
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Invalid image: {e}") from e
    except (OSError, ValueError, SyntaxError) as e:
        # truncated files, broken codec data, unsupported modes
        raise ImageDecodeError(f"Could not process image: {e}") from e
    finally:
        buffer.close()

    return NormalizedImage(
        data_url=f"data:{OUTPUT_MEDIA_TYPE};base64,{encoded}",
        width=width,
        height=height,
    )


async def normalize_image(data: bytes) -> NormalizedImage:
    """Resample and re-encode one photo; raises ImageDecodeError on failure.

    The Pillow work runs in a worker thread so several slots can be
    normalized at once without blocking the event loop.
    """
    if not data:
        raise ImageDecodeError("Invalid image: empty file")
    return await asyncio.to_thread(_normalize_sync, data)
