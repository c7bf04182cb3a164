# palette_dither/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, error classes and lightweight helpers.
"""

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 3)
U8Rows = NDArray[np.uint8]  # (N, 3)

# Anything the engine can mutate in place: bytearray, memoryview, uint8 ndarray.
PixelBuffer = Union[bytearray, memoryview, NDArray[np.uint8]]


# Errors


class InvalidGeometryError(ValueError):
    """Buffer length does not match width * height * 3."""


class UnsupportedMethodError(ValueError):
    """Dithering method id with no kernel or threshold table."""


class UnsupportedPaletteError(ValueError):
    """Palette id with no palette table."""


# Value objects


@dataclass(frozen=True)
class Color:
    """One 8-bit RGB colour."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"channel out of range 0..255: {channel}")

    @classmethod
    def from_int(cls, packed: int) -> "Color":
        """Unpack 0xRRGGBB. Bits above the low 24 are ignored."""
        return cls((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)

    @classmethod
    def from_bytes(cls, raw: Sequence[int]) -> "Color":
        """First three bytes of any indexable sequence (bytes, list, numpy row)."""
        return cls(int(raw[0]), int(raw[1]), int(raw[2]))

    @classmethod
    def from_hex(cls, hex_str: str) -> "Color":
        return cls(*hex_to_rgb(hex_str))

    def as_tuple(self) -> RGBTuple:
        return (self.r, self.g, self.b)

    @property
    def hex(self) -> HexStr:
        return rgb_to_hex(self.as_tuple())


class QuantizationError(NamedTuple):
    """Signed per-channel residual: original minus chosen palette colour."""

    r: float
    g: float
    b: float


# Small helpers


def clamp_value(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 3:
        raise TypeError("expected uint8 (H,W,3) image")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "U8Image",
    "U8Rows",
    "PixelBuffer",
    # errors
    "InvalidGeometryError",
    "UnsupportedMethodError",
    "UnsupportedPaletteError",
    # value objects
    "Color",
    "QuantizationError",
    # helpers
    "clamp_value",
    "rgb_to_hex",
    "hex_to_rgb",
    "assert_u8_image_rgb",
]
