# palette_dither/matcher.py
from __future__ import annotations

"""
Nearest-colour search in RGB.

Functions:
  squared_distance(a, b) -> int
  match_color(color, palette) -> (chosen Color, QuantizationError)
  nearest_palette_indices(rgb_rows, pal_rgb) -> int32 [N]
  map_rows_to_palette(rgb_rows, pal_rgb) -> uint8 [N,3]

Both paths use squared Euclidean distance (no sqrt, the argmin is the same) and
pick the first palette entry on ties, so the scalar and vectorised searches
always agree.
"""

from typing import Iterable, Tuple

import numpy as np

from .constants import MATCH_CHUNK_ROWS
from .core_types import Color, QuantizationError, U8Rows


def squared_distance(a: Color, b: Color) -> int:
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return dr * dr + dg * dg + db * db


def match_color(
    color: Color, palette: Iterable[Color]
) -> Tuple[Color, QuantizationError]:
    """
    Closest palette entry and the signed residual (original - chosen).

    Linear scan with a strict '<', so the earliest entry wins ties.
    Raises ValueError on an empty palette.
    """
    best: Color | None = None
    best_dist = 0
    for candidate in palette:
        dist = squared_distance(color, candidate)
        if best is None or dist < best_dist:
            best = candidate
            best_dist = dist
    if best is None:
        raise ValueError("cannot match against an empty palette")

    err = QuantizationError(
        float(color.r - best.r),
        float(color.g - best.g),
        float(color.b - best.b),
    )
    return best, err


def nearest_palette_indices(
    rgb_rows: U8Rows, pal_rgb: U8Rows, chunk: int = MATCH_CHUNK_ROWS
) -> np.ndarray:
    """For each RGB row, index of the nearest palette row (first on ties)."""
    if pal_rgb.shape[0] == 0:
        raise ValueError("cannot match against an empty palette")
    rows = rgb_rows.reshape(-1, 3)
    out = np.empty(rows.shape[0], dtype=np.int32)
    pal = pal_rgb.astype(np.int32)
    for i in range(0, rows.shape[0], chunk):
        pts = rows[i : i + chunk].astype(np.int32)
        diff = pts[:, None, :] - pal[None, :, :]
        dist2 = np.sum(diff * diff, axis=2)
        # argmin returns the first minimum, matching match_color's tie-break
        out[i : i + chunk] = np.argmin(dist2, axis=1)
    return out


def map_rows_to_palette(rgb_rows: U8Rows, pal_rgb: U8Rows) -> U8Rows:
    """Replace every RGB row with its nearest palette row."""
    idx = nearest_palette_indices(rgb_rows, pal_rgb)
    return pal_rgb[idx].astype(np.uint8, copy=False)


__all__ = [
    "squared_distance",
    "match_color",
    "nearest_palette_indices",
    "map_rows_to_palette",
]
