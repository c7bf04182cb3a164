# palette_dither/__init__.py
"""
palette_dither package.

Purpose:
  Reduce RGB images to a small fixed palette with error-diffusion or ordered
  dithering. See dither_image.py for the CLI.

Public API:
  dither        : in-place dithering of a flat RGB buffer.
  dither_image  : same, for uint8 (H,W,3) arrays.
  match_color   : nearest palette colour + quantization error.
  weights_for   : method id -> DiffusionKernel | ThresholdMatrix | None.
  get_palette   : palette id -> Palette.
  core_types    : Color, QuantizationError, error classes, aliases.
  palette_data  : built-in palettes.
  kernels       : diffusion kernels and Bayer threshold matrices.
  image_io      : Pillow decode/encode helpers.
  utils         : logging and report helpers.

Quick start:
  from palette_dither import dither_image
  from palette_dither.image_io import load_image_rgb, save_image_rgb

  rgb, w, h = load_image_rgb(path)
  dither_image(rgb, "floyd-steinberg", "color16")
  save_image_rgb(out_path, rgb, w, h)
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import core_types
from . import palette_data
from . import kernels
from . import matcher
from . import image_io
from . import utils

from .core_types import (  # noqa: E402,F401
    Color,
    QuantizationError,
    InvalidGeometryError,
    UnsupportedMethodError,
    UnsupportedPaletteError,
)
from .palette_data import Palette, PALETTE_NAMES, get_palette  # noqa: E402,F401
from .kernels import METHODS, weights_for  # noqa: E402,F401
from .matcher import match_color  # noqa: E402,F401
from .engine import dither, dither_image  # noqa: E402,F401

__all__ = [
    "__version__",
    "core_types",
    "palette_data",
    "kernels",
    "matcher",
    "image_io",
    "utils",
    "Color",
    "QuantizationError",
    "InvalidGeometryError",
    "UnsupportedMethodError",
    "UnsupportedPaletteError",
    "Palette",
    "PALETTE_NAMES",
    "get_palette",
    "METHODS",
    "weights_for",
    "match_color",
    "dither",
    "dither_image",
]
