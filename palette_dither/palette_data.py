# palette_dither/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  PALETTE_MONOCHROME, PALETTE_COLOR8, PALETTE_COLOR16: list[tuple[str, str]]  # [(hex, name), ...]
  PALETTE_NAMES: ids accepted by get_palette / the CLI
  build_palette(name, hex_name_pairs) -> Palette
  get_palette(name) -> Palette
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

import numpy as np

from .core_types import Color, HexStr, U8Rows, UnsupportedPaletteError


PALETTE_MONOCHROME: List[Tuple[str, str]] = [
    ("#000000", "Black"),
    ("#ffffff", "White"),
]

PALETTE_COLOR8: List[Tuple[str, str]] = [
    ("#000000", "Black"),
    ("#cc3500", "Red"),
    ("#5ec809", "Green"),
    ("#1d286f", "Navy"),
    ("#00c4ff", "Sky Blue"),
    ("#8e8e8e", "Gray"),
    ("#ffe052", "Yellow"),
    ("#ffffff", "White"),
]

PALETTE_COLOR16: List[Tuple[str, str]] = [
    ("#000000", "Black"),
    ("#9d9d9d", "Gray"),
    ("#ffffff", "White"),
    ("#be2633", "Red"),
    ("#e06f8b", "Pink"),
    ("#493c2b", "Dark Brown"),
    ("#a46422", "Brown"),
    ("#eb8931", "Orange"),
    ("#f7e26b", "Yellow"),
    ("#2f484e", "Dark Teal"),
    ("#44891a", "Green"),
    ("#a3ce27", "Lime"),
    ("#1b2632", "Night Blue"),
    ("#005784", "Sea Blue"),
    ("#31a2f2", "Sky Blue"),
    ("#b2dcef", "Cloud Blue"),
]


@dataclass(frozen=True)
class Palette:
    """Ordered, read-only colour table. Order decides tie-breaks."""

    name: str
    colors: Tuple[Color, ...]
    names: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError("palette must not be empty")
        if len(self.names) != len(self.colors):
            raise ValueError("palette names and colours differ in length")

    def __iter__(self) -> Iterator[Color]:
        return iter(self.colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __getitem__(self, index: int) -> Color:
        return self.colors[index]

    def rgb_array(self) -> U8Rows:
        """uint8 [P,3] rows in palette order."""
        return np.array([c.as_tuple() for c in self.colors], dtype=np.uint8).reshape(
            -1, 3
        )

    def name_of(self) -> Dict[HexStr, str]:
        """'#rrggbb' -> human-readable name."""
        return {c.hex: n for c, n in zip(self.colors, self.names)}

    @property
    def spread(self) -> float:
        """
        Ordered-dither bias amplitude: one quantization step of the uniform RGB
        grid this palette approximates (L levels per channel, L**3 ~ size).
        """
        levels = max(2, int(round(len(self.colors) ** (1.0 / 3.0))))
        return 255.0 / (levels - 1)


def build_palette(name: str, hex_name_pairs: List[Tuple[str, str]]) -> Palette:
    """Convert a list of (hex, name) into a Palette, preserving order."""
    colors = tuple(Color.from_hex(hx) for hx, _ in hex_name_pairs)
    names = tuple(n for _, n in hex_name_pairs)
    return Palette(name=name, colors=colors, names=names)


MONOCHROME = build_palette("monochrome", PALETTE_MONOCHROME)
COLOR8 = build_palette("color8", PALETTE_COLOR8)
COLOR16 = build_palette("color16", PALETTE_COLOR16)

_PALETTES: Dict[str, Palette] = {p.name: p for p in (MONOCHROME, COLOR8, COLOR16)}

PALETTE_NAMES: Tuple[str, ...] = tuple(_PALETTES)


def get_palette(name: str) -> Palette:
    """Look up a built-in palette by id (case-insensitive)."""
    key = name.strip().lower()
    try:
        return _PALETTES[key]
    except KeyError:
        raise UnsupportedPaletteError(
            f"unsupported palette {name!r}; expected one of {', '.join(PALETTE_NAMES)}"
        ) from None


__all__ = [
    "PALETTE_MONOCHROME",
    "PALETTE_COLOR8",
    "PALETTE_COLOR16",
    "Palette",
    "build_palette",
    "MONOCHROME",
    "COLOR8",
    "COLOR16",
    "PALETTE_NAMES",
    "get_palette",
]
