# palette_dither/engine.py
from __future__ import annotations

"""
Dithering engine.

dither(buffer, method, palette, width, height) rewrites a flat RGB buffer in
place so every pixel is a palette colour.

  none      : nearest palette colour per pixel, nothing else changes.
  diffusion : raster scan (rows top to bottom, pixels left to right). Each
              pixel is matched, written back, then its error is pushed onto
              the unvisited neighbours named by the kernel. Every neighbour
              update is rounded and clamped to 0..255 on its own.
  ordered   : each pixel is biased by its threshold matrix entry before
              matching. No pixel depends on another, so this path is vectorised.

Geometry, method and palette are all checked before the first byte changes.
"""

import math
import time
from typing import Iterable, Optional, Union

import numpy as np

from .core_types import (
    Color,
    InvalidGeometryError,
    PixelBuffer,
    U8Image,
    assert_u8_image_rgb,
    clamp_value,
)
from .kernels import DiffusionKernel, Method, ThresholdMatrix, weights_for
from .matcher import map_rows_to_palette, match_color
from .palette_data import Palette, get_palette
from .utils import debug_log, format_seconds_compact, print_config_line

MethodArg = Union[str, DiffusionKernel, ThresholdMatrix, None]
PaletteArg = Union[str, Palette, Iterable[Color]]


# Call-boundary checks


def _writable_view(buffer: PixelBuffer) -> np.ndarray:
    """Flat uint8 view sharing memory with buffer. Never copies."""
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise TypeError(f"expected a uint8 buffer, got {buffer.dtype}")
        if not buffer.flags.c_contiguous:
            raise TypeError("pixel buffer must be C-contiguous")
        flat = buffer.reshape(-1)
    else:
        try:
            flat = np.frombuffer(buffer, dtype=np.uint8)
        except BufferError as e:
            raise TypeError("pixel buffer must be C-contiguous") from e
    if not flat.flags.writeable:
        raise TypeError("pixel buffer is read-only")
    return flat


def _check_geometry(flat: np.ndarray, width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise InvalidGeometryError(f"negative image size {width}x{height}")
    expected = width * height * 3
    if flat.size != expected:
        raise InvalidGeometryError(
            f"buffer holds {flat.size} bytes, {width}x{height} RGB needs {expected}"
        )


def _resolve_method(method: MethodArg) -> Optional[Method]:
    if method is None or isinstance(method, (DiffusionKernel, ThresholdMatrix)):
        return method
    return weights_for(method)


def _resolve_palette(palette: PaletteArg) -> Palette:
    if isinstance(palette, Palette):
        return palette
    if isinstance(palette, str):
        return get_palette(palette)
    colors = tuple(palette)
    return Palette("custom", colors, tuple(c.hex for c in colors))


# Per-update arithmetic


def _add_error(current: int, error: float, weight: float) -> int:
    """current + error * weight, rounded half up, clamped to 0..255."""
    return int(clamp_value(math.floor(int(current) + error * weight + 0.5), 0, 255))


# Paths


def _map_only(flat: np.ndarray, palette: Palette) -> None:
    flat[:] = map_rows_to_palette(flat.reshape(-1, 3), palette.rgb_array()).reshape(-1)


def _diffuse(
    flat: np.ndarray, palette: Palette, kernel: DiffusionKernel, width: int, height: int
) -> None:
    colors = palette.colors
    for y in range(height):
        for x in range(width):
            i = (y * width + x) * 3
            sampled = Color(int(flat[i]), int(flat[i + 1]), int(flat[i + 2]))
            chosen, err = match_color(sampled, colors)

            # finalise this pixel before touching any neighbour
            flat[i] = chosen.r
            flat[i + 1] = chosen.g
            flat[i + 2] = chosen.b

            if err.r == 0.0 and err.g == 0.0 and err.b == 0.0:
                continue
            for dx, dy, weight in kernel.in_bounds_offsets(x, y, width, height):
                j = ((y + dy) * width + (x + dx)) * 3
                flat[j] = _add_error(flat[j], err.r, weight)
                flat[j + 1] = _add_error(flat[j + 1], err.g, weight)
                flat[j + 2] = _add_error(flat[j + 2], err.b, weight)


def _ordered(
    flat: np.ndarray,
    palette: Palette,
    matrix: ThresholdMatrix,
    width: int,
    height: int,
) -> None:
    rgb = flat.reshape(height, width, 3).astype(np.float64)
    bias = matrix.threshold_map(width, height).astype(np.float64) * palette.spread
    biased = np.clip(np.floor(rgb + bias[..., None] + 0.5), 0, 255).astype(np.uint8)
    flat[:] = map_rows_to_palette(biased.reshape(-1, 3), palette.rgb_array()).reshape(
        -1
    )


# Entry points


def dither(
    buffer: PixelBuffer,
    method: MethodArg,
    palette: PaletteArg,
    width: int,
    height: int,
    *,
    debug: bool = False,
) -> None:
    """
    Dither buffer in place.

    Args:
      buffer : writable row-major RGB bytes (bytearray, memoryview or a
               C-contiguous uint8 ndarray of any shape), width*height*3 long
      method : method id ("none", "floyd-steinberg", "bayer4x4", ...) or an
               already resolved DiffusionKernel / ThresholdMatrix / None
      palette: palette id ("monochrome", "color8", "color16"), a Palette, or
               any non-empty iterable of Color
      width, height: image size in pixels
      debug  : log the run configuration and timing

    Raises:
      InvalidGeometryError   : buffer length != width*height*3, or negative size
      UnsupportedMethodError : unknown method id
      UnsupportedPaletteError: unknown palette id
      TypeError              : read-only or non-uint8 buffer
      ValueError             : empty palette
    """
    flat = _writable_view(buffer)
    _check_geometry(flat, width, height)
    table = _resolve_method(method)
    pal = _resolve_palette(palette)

    if debug:
        print_config_line(
            "dither",
            [
                ("Method", table.name if table is not None else "none"),
                ("Palette", f"{pal.name} ({len(pal)})"),
                ("Size", f"{width}x{height}"),
            ],
            debug=True,
        )
    if flat.size == 0:
        return

    t0 = time.perf_counter()
    if table is None:
        _map_only(flat, pal)
    elif isinstance(table, DiffusionKernel):
        _diffuse(flat, pal, table, width, height)
    else:
        _ordered(flat, pal, table, width, height)

    if debug:
        secs = time.perf_counter() - t0
        debug_log(
            f"dithered {width * height:,} px in {format_seconds_compact(secs)}"
        )


def dither_image(
    rgb: U8Image, method: MethodArg, palette: PaletteArg, *, debug: bool = False
) -> U8Image:
    """Dither a uint8 (H,W,3) array in place and return it."""
    image = assert_u8_image_rgb(rgb)
    height, width = int(image.shape[0]), int(image.shape[1])
    dither(image, method, palette, width, height, debug=debug)
    return image


__all__ = ["dither", "dither_image"]
