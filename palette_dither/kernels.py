# palette_dither/kernels.py
from __future__ import annotations

"""
Diffusion kernels and ordered-dither threshold matrices.

Two separate shapes, never mixed:
  DiffusionKernel : (row_offset, col_offset) -> weight, applied to neighbours
                    that have not been visited yet.
  ThresholdMatrix : N x N Bayer ranks, one bias per pixel position, nothing
                    pushed to neighbours.

weights_for(method) resolves a method id to one of the above, or None for
plain palette mapping. Unknown ids raise UnsupportedMethodError.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .core_types import UnsupportedMethodError

Offset = Tuple[int, int]  # (row_offset, col_offset)


@dataclass(frozen=True)
class DiffusionKernel:
    """Error-diffusion weights keyed by (row_offset, col_offset)."""

    name: str
    weights: Mapping[Offset, float]

    def __post_init__(self) -> None:
        for (dy, dx), w in self.weights.items():
            if dy < 0 or (dy == 0 and dx <= 0):
                raise ValueError(
                    f"{self.name}: weight at ({dy}, {dx}) points at an already visited pixel"
                )
            if w < 0.0:
                raise ValueError(f"{self.name}: negative weight at ({dy}, {dx})")
        if self.total_weight() > 1.0 + 1e-9:
            raise ValueError(f"{self.name}: weights sum above 1.0")

    def weight(self, row_offset: int, col_offset: int) -> float:
        """Weight for a neighbour; 0.0 for every position not in the kernel."""
        return float(self.weights.get((row_offset, col_offset), 0.0))

    def offsets(self) -> List[Offset]:
        """Kernel positions in scan order (row, then column)."""
        return sorted(self.weights)

    def total_weight(self) -> float:
        return float(sum(self.weights.values()))

    def in_bounds_offsets(
        self, x: int, y: int, width: int, height: int
    ) -> Iterator[Tuple[int, int, float]]:
        """
        Yield (dx, dy, weight) for neighbours of (x, y) inside the image.
        No wrap-around or reflection: anything outside is dropped.
        """
        for dy, dx in self.offsets():
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and ny < height:
                yield dx, dy, self.weights[(dy, dx)]


def kernel_from_grid(
    name: str, rows: Sequence[Sequence[int]], divisor: int, origin_col: int
) -> DiffusionKernel:
    """
    Build a kernel from an integer grid as usually printed in the literature.

    rows[0] is the current row, rows[1:] the rows below. origin_col is the
    grid column of the current pixel. Zeros are dropped.
    """
    weights: Dict[Offset, float] = {}
    for dy, row in enumerate(rows):
        for col, value in enumerate(row):
            if value:
                weights[(dy, col - origin_col)] = value / divisor
    return DiffusionKernel(name, MappingProxyType(weights))


# Error diffusion kernels. Grids are 5 columns wide with the current pixel in
# column 2; entries left of it in row 0 are always 0.

FLOYD_STEINBERG = kernel_from_grid(
    "floyd-steinberg",
    [
        [0, 0, 0, 7, 0],
        [0, 3, 5, 1, 0],
    ],
    16,
    2,
)

JARVIS_JUDICE_NINKE = kernel_from_grid(
    "jarvis",
    [
        [0, 0, 0, 7, 5],
        [3, 5, 7, 5, 3],
        [1, 3, 5, 3, 1],
    ],
    48,
    2,
)

STUCKI = kernel_from_grid(
    "stucki",
    [
        [0, 0, 0, 8, 4],
        [2, 4, 8, 4, 2],
        [1, 2, 4, 2, 1],
    ],
    42,
    2,
)

# Pushes 6/8 of the error; the remaining 2/8 is lost.
ATKINSON = kernel_from_grid(
    "atkinson",
    [
        [0, 0, 0, 1, 1],
        [0, 1, 1, 1, 0],
        [0, 0, 1, 0, 0],
    ],
    8,
    2,
)

BURKES = kernel_from_grid(
    "burkes",
    [
        [0, 0, 0, 8, 4],
        [2, 4, 8, 4, 2],
    ],
    32,
    2,
)

SIERRA = kernel_from_grid(
    "sierra",
    [
        [0, 0, 0, 5, 3],
        [2, 4, 5, 4, 2],
        [0, 2, 3, 2, 0],
    ],
    32,
    2,
)

TWO_ROW_SIERRA = kernel_from_grid(
    "two-row-sierra",
    [
        [0, 0, 0, 4, 3],
        [1, 2, 3, 2, 1],
    ],
    16,
    2,
)

SIERRA_LITE = kernel_from_grid(
    "sierra-lite",
    [
        [0, 0, 0, 2, 0],
        [0, 1, 1, 0, 0],
    ],
    4,
    2,
)


# Ordered dithering


def bayer_matrix(n: int) -> np.ndarray:
    """n x n Bayer index matrix (values 0..n*n-1); n must be a power of two."""
    if n <= 0 or n & (n - 1) != 0:
        raise ValueError("Bayer size must be a positive power of 2 (e.g. 2, 4, 8)")
    matrix = np.array([[0]], dtype=np.int32)
    while matrix.shape[0] < n:
        q = 4 * matrix
        matrix = np.block([[q + 0, q + 2], [q + 3, q + 1]])
    return matrix


@dataclass(frozen=True)
class ThresholdMatrix:
    """Tiled N x N rank matrix for ordered dithering."""

    name: str
    size: int
    ranks: Tuple[Tuple[int, ...], ...]

    @classmethod
    def bayer(cls, name: str, size: int) -> "ThresholdMatrix":
        m = bayer_matrix(size)
        return cls(name, size, tuple(tuple(int(v) for v in row) for row in m))

    def threshold_at(self, x: int, y: int) -> float:
        """Bias in (-0.5, 0.5) for pixel (x, y); the matrix repeats every N pixels."""
        n = self.size
        return (self.ranks[y % n][x % n] + 0.5) / (n * n) - 0.5

    def threshold_map(self, width: int, height: int) -> np.ndarray:
        """float32 [height, width] of threshold_at values."""
        n = self.size
        tile = (np.array(self.ranks, dtype=np.float32) + 0.5) / float(n * n) - 0.5
        reps = (height // n + 1, width // n + 1)
        return np.tile(tile, reps)[:height, :width].astype(np.float32, copy=False)


BAYER_2X2 = ThresholdMatrix.bayer("bayer2x2", 2)
BAYER_4X4 = ThresholdMatrix.bayer("bayer4x4", 4)
BAYER_8X8 = ThresholdMatrix.bayer("bayer8x8", 8)


# Method table

Method = Union[DiffusionKernel, ThresholdMatrix]

NONE = "none"

_TABLE: Dict[str, Optional[Method]] = {
    NONE: None,
    FLOYD_STEINBERG.name: FLOYD_STEINBERG,
    JARVIS_JUDICE_NINKE.name: JARVIS_JUDICE_NINKE,
    STUCKI.name: STUCKI,
    ATKINSON.name: ATKINSON,
    BURKES.name: BURKES,
    SIERRA.name: SIERRA,
    TWO_ROW_SIERRA.name: TWO_ROW_SIERRA,
    SIERRA_LITE.name: SIERRA_LITE,
    BAYER_2X2.name: BAYER_2X2,
    BAYER_4X4.name: BAYER_4X4,
    BAYER_8X8.name: BAYER_8X8,
}

# Jarvis, Judice and Ninke published one kernel together.
ALIASES: Dict[str, str] = {
    "judice": JARVIS_JUDICE_NINKE.name,
    "ninke": JARVIS_JUDICE_NINKE.name,
    "jarvis-judice-ninke": JARVIS_JUDICE_NINKE.name,
    "floyd": FLOYD_STEINBERG.name,
    "sierra-2row": TWO_ROW_SIERRA.name,
    "bayer2": BAYER_2X2.name,
    "bayer4": BAYER_4X4.name,
    "bayer8": BAYER_8X8.name,
}

METHODS: Tuple[str, ...] = tuple(_TABLE)

DIFFUSION_METHODS: Tuple[str, ...] = tuple(
    k for k, v in _TABLE.items() if isinstance(v, DiffusionKernel)
)
ORDERED_METHODS: Tuple[str, ...] = tuple(
    k for k, v in _TABLE.items() if isinstance(v, ThresholdMatrix)
)


def normalise_method_name(method: str) -> str:
    """'Floyd_Steinberg' / 'floyd steinberg' -> 'floyd-steinberg'; aliases resolved."""
    key = "-".join(method.strip().lower().replace("_", " ").split())
    return ALIASES.get(key, key)


def weights_for(method: str) -> Optional[Method]:
    """
    Resolve a method id to its table.

    Returns None for "none" (palette mapping only), a DiffusionKernel or a
    ThresholdMatrix otherwise. Unknown ids raise UnsupportedMethodError.
    """
    key = normalise_method_name(method)
    if key not in _TABLE:
        raise UnsupportedMethodError(
            f"unsupported dithering method {method!r}; expected one of {', '.join(METHODS)}"
        )
    return _TABLE[key]


def is_diffusion(method: str) -> bool:
    return isinstance(weights_for(method), DiffusionKernel)


def is_ordered(method: str) -> bool:
    return isinstance(weights_for(method), ThresholdMatrix)


__all__ = [
    "DiffusionKernel",
    "ThresholdMatrix",
    "kernel_from_grid",
    "bayer_matrix",
    "FLOYD_STEINBERG",
    "JARVIS_JUDICE_NINKE",
    "STUCKI",
    "ATKINSON",
    "BURKES",
    "SIERRA",
    "TWO_ROW_SIERRA",
    "SIERRA_LITE",
    "BAYER_2X2",
    "BAYER_4X4",
    "BAYER_8X8",
    "Method",
    "NONE",
    "ALIASES",
    "METHODS",
    "DIFFUSION_METHODS",
    "ORDERED_METHODS",
    "normalise_method_name",
    "weights_for",
    "is_diffusion",
    "is_ordered",
]
