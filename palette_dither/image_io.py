# palette_dither/image_io.py
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageOps

from .constants import OUTPUT_SUFFIX
from .core_types import InvalidGeometryError, PixelBuffer, U8Image

"""
Image I/O helpers (8-bit RGB, no alpha), resize and output path utilities.
"""


def load_image_rgb(path: Path) -> Tuple[U8Image, int, int]:
    """
    Decode any Pillow-readable image into (buffer, width, height).

    EXIF orientation is applied and alpha dropped. The buffer is a
    C-contiguous uint8 (H,W,3) array the engine can dither in place.
    """
    with Image.open(path) as im0:
        im = ImageOps.exif_transpose(im0).convert("RGB")
    arr = np.ascontiguousarray(np.array(im, dtype=np.uint8))
    height, width = int(arr.shape[0]), int(arr.shape[1])
    return arr, width, height


def save_image_rgb(path: Path, buffer: PixelBuffer, width: int, height: int) -> Path:
    """Encode a flat or (H,W,3) RGB buffer; format follows the file extension."""
    flat = np.frombuffer(buffer, dtype=np.uint8)
    if flat.size != width * height * 3:
        raise InvalidGeometryError(
            f"buffer holds {flat.size} bytes, {width}x{height} RGB needs {width * height * 3}"
        )
    rgb = flat.reshape(height, width, 3)
    Image.fromarray(rgb).save(path)
    return path


def pillow_resample_from_name(name: str) -> Image.Resampling:
    """Map a string to a Pillow resampling filter enum."""
    if name == "nearest":
        return Image.Resampling.NEAREST
    if name == "bilinear":
        return Image.Resampling.BILINEAR
    if name == "bicubic":
        return Image.Resampling.BICUBIC
    if name == "lanczos":
        return Image.Resampling.LANCZOS
    return Image.Resampling.BICUBIC  # default


def resize_rgb_height(
    rgb: U8Image, dst_h: Optional[int], resample: Image.Resampling
) -> U8Image:
    """Downscale so height == dst_h, keeping aspect. Never upscales."""
    H0, W0, _ = rgb.shape
    if dst_h is None or dst_h <= 0 or dst_h >= H0:
        return rgb
    dst_w = max(1, int(round(W0 * (dst_h / float(H0)))))
    im = Image.fromarray(rgb).resize((dst_w, dst_h), resample=resample)
    return np.ascontiguousarray(np.array(im, dtype=np.uint8))


def default_output_path(src: Path, suffix: str = OUTPUT_SUFFIX) -> Path:
    """photo.jpg -> photo_out.jpg next to the input. No extension -> .png."""
    return src.with_name(f"{src.stem}{suffix}{src.suffix or '.png'}")


__all__ = [
    "load_image_rgb",
    "save_image_rgb",
    "pillow_resample_from_name",
    "resize_rgb_height",
    "default_output_path",
]
