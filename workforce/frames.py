from __future__ import annotations

import base64
import io

from PIL import Image, UnidentifiedImageError

from .config import CONFIG


def load_frame(data: bytes) -> Image.Image:
    """Decode captured camera bytes into an RGB image."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ValueError("Captured frame is not a readable image.") from exc
    return image.convert("RGB")


def downscale(image: Image.Image, max_side: int | None = None) -> Image.Image:
    max_side = max_side or CONFIG.frame_max_side
    if max(image.size) <= max_side:
        return image
    scaled = image.copy()
    scaled.thumbnail((max_side, max_side))
    return scaled


def encode_jpeg(image: Image.Image, quality: int | None = None) -> str:
    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=quality or CONFIG.frame_jpeg_quality)
    return base64.b64encode(buf.getvalue()).decode("ascii")


def decode_jpeg(data: str) -> Image.Image:
    return load_frame(base64.b64decode(data))


def frame_to_base64(data: bytes, max_side: int | None = None, quality: int | None = None) -> str:
    """Camera bytes (PNG or JPEG) -> downscaled base64 JPEG ready for the model."""
    return encode_jpeg(downscale(load_frame(data), max_side), quality)
