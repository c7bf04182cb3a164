# palette_dither/constants.py
"""
Defaults and tunables used across the project.

- CLI defaults (method, palette, output suffix, jobs)
- Image file extensions picked up in folder mode
- Vectorised matcher chunk size
"""
from __future__ import annotations

from typing import FrozenSet

# =========================
# CLI defaults
# =========================
DEFAULT_METHOD = "floyd-steinberg"
DEFAULT_PALETTE = "monochrome"

# Appended to the input stem when no output path is given: photo.png -> photo_out.png
OUTPUT_SUFFIX = "_out"

# Files processed in parallel in folder mode.
DEFAULT_JOBS = 1

IMAGE_EXTS: FrozenSet[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff"}
)

# =========================
# Matcher
# =========================
# Pixels per broadcast block in the vectorised nearest-colour search.
# Memory per block is roughly MATCH_CHUNK_ROWS * palette_size * 12 bytes.
MATCH_CHUNK_ROWS = 200_000


__all__ = [
    "DEFAULT_METHOD",
    "DEFAULT_PALETTE",
    "OUTPUT_SUFFIX",
    "DEFAULT_JOBS",
    "IMAGE_EXTS",
    "MATCH_CHUNK_ROWS",
]
