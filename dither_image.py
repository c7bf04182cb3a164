#!/usr/bin/env python3
"""
dither_image.py
Reduce images to a small fixed palette with error-diffusion or ordered dithering.

Usage:
  python dither_image.py (SRC | -i SRC) [-o OUT] [-d METHOD] [-p PALETTE] [--height H]
                         [--resample nearest|bilinear|bicubic|lanczos] [--jobs N] [--debug]

Methods:
  none                        : nearest palette colour only.
  floyd-steinberg (default), jarvis, stucki, atkinson, burkes, sierra,
  two-row-sierra, sierra-lite : error diffusion, strict left-to-right scan.
  bayer2x2, bayer4x4, bayer8x8: ordered dithering.

Palettes:
  monochrome (default), color8, color16.

Input:
  Any Pillow-readable image, or a folder of them. Alpha is dropped.

Output:
  If OUT is omitted, writes <stem>_out<ext> next to INPUT. In folder mode OUT is a
  directory.
"""

from __future__ import annotations

import argparse
import io
import sys
import time
from concurrent.futures import ProcessPoolExecutor
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from typing import List, Optional

from PIL import UnidentifiedImageError

from palette_dither.constants import (
    DEFAULT_JOBS,
    DEFAULT_METHOD,
    DEFAULT_PALETTE,
    IMAGE_EXTS,
    OUTPUT_SUFFIX,
)
from palette_dither.engine import dither
from palette_dither.image_io import (
    default_output_path,
    load_image_rgb,
    pillow_resample_from_name,
    resize_rgb_height,
    save_image_rgb,
)
from palette_dither.kernels import METHODS, normalise_method_name
from palette_dither.palette_data import PALETTE_NAMES, get_palette
from palette_dither.utils import (
    colour_usage_report,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
    warn,
)

# CLI args


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder (positional SRC or -i/--in)
        out: optional output file (or directory in folder mode)
        method: normalised method id
        palette: palette id
        height: optional int max output height
        resample: resize filter name
        jobs: files processed in parallel (folder mode)
        debug: bool for timings and colour stats
    """
    parser = argparse.ArgumentParser(
        prog="dither_image",
        description="Dither image(s) down to a fixed colour palette.",
    )
    parser.add_argument(
        "src", nargs="?", type=Path, default=None, help="Input image or folder"
    )
    parser.add_argument(
        "-i",
        "--in",
        dest="src_in",
        type=Path,
        default=None,
        help="Input image or folder (alternative to SRC)",
    )
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        default=None,
        help=f"Output file, or directory in folder mode (default: <stem>{OUTPUT_SUFFIX}<ext>)",
    )
    parser.add_argument(
        "-d",
        "--dither",
        dest="method",
        type=normalise_method_name,
        choices=METHODS,
        default=DEFAULT_METHOD,
        help="Dithering method.",
    )
    parser.add_argument(
        "-p",
        "-c",
        "--palette",
        "--color",
        dest="palette",
        type=str.lower,
        choices=PALETTE_NAMES,
        default=DEFAULT_PALETTE,
        help="Target palette.",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Resize so height<=H before dithering. Omit for no resize.",
    )
    parser.add_argument(
        "--resample",
        choices=["nearest", "bilinear", "bicubic", "lanczos"],
        default="lanczos",
        help="Scaling filter used with --height.",
    )
    parser.add_argument(
        "--jobs", type=int, default=DEFAULT_JOBS, help="Files processed in parallel"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose timings")
    args = parser.parse_args(argv)
    if args.src is not None and args.src_in is not None and args.src != args.src_in:
        parser.error("give the input either as SRC or with -i/--in, not both")
    if args.src is None:
        args.src = args.src_in
    if args.src is None:
        parser.error("an input image or folder is required (SRC or -i/--in)")
    return args


# Per-file processing


def _process_single_image(
    src_path: Path,
    out_path: Optional[Path],
    method: str,
    palette_name: str,
    height_cap: Optional[int],
    resample_name: str,
    debug: bool,
) -> bool:
    """
    Process a single image path end-to-end:
      load -> optional resize -> dither -> save -> report.

    Returns False (after logging the reason) when the file could not be
    decoded, dithered or written.
    """
    t_start = time.perf_counter()
    if out_path is None:
        out_path = default_output_path(src_path)
    palette = get_palette(palette_name)

    print_banner(src_path.name)

    try:
        rgb, width0, height0 = load_image_rgb(src_path)
    except (UnidentifiedImageError, OSError) as e:
        error(f"cannot decode {src_path}: {e}")
        return False
    if debug:
        debug_log(key_value_pairs_to_string([("Loaded", f"{width0}x{height0}")]))

    rgb = resize_rgb_height(rgb, height_cap, pillow_resample_from_name(resample_name))
    height, width = int(rgb.shape[0]), int(rgb.shape[1])
    if debug and (width, height) != (width0, height0):
        debug_log(key_value_pairs_to_string([("Resized", f"{width}x{height}")]))
    t_loaded = time.perf_counter()

    try:
        dither(rgb, method, palette, width, height, debug=debug)
    except ValueError as e:
        error(f"cannot dither {src_path}: {e}")
        return False
    t_dithered = time.perf_counter()

    log(f"Saving output image to: {out_path}")
    try:
        save_image_rgb(out_path, rgb, width, height)
    except (OSError, ValueError) as e:
        error(f"cannot write {out_path}: {e}")
        return False
    t_saved = time.perf_counter()

    log(
        f"Method: {method} | palette={palette.name} ({len(palette)}) | size={width}x{height}"
    )
    log("Colours used:")
    for hex_code, name, count in colour_usage_report(rgb, palette.name_of()):
        log(f"  {hex_code}  {name}: {count:,}")

    if debug:
        total_pixels = width * height
        dither_secs = t_dithered - t_loaded
        if dither_secs > 0:
            rate = (total_pixels / dither_secs) / 1e6
            debug_log(f"throughput {rate:.2f} MPx/s")
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"dither={format_seconds_compact(dither_secs)}, "
            f"save={format_seconds_compact(t_saved - t_dithered)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")
    return True


def _output_for(path: Path, outdir: Optional[Path]) -> Optional[Path]:
    if outdir is None:
        return None
    return outdir / default_output_path(path).name


def _process_one_captured(
    path: Path,
    outdir: Optional[Path],
    method: str,
    palette_name: str,
    height_cap: Optional[int],
    resample_name: str,
    debug: bool,
) -> tuple[bool, str]:
    """
    Process a single file with stdout/stderr capture.

    Runs in a worker process, so the redirect only affects that process.
    Output is returned and printed by the parent in input order.
    """
    buf = io.StringIO()
    with redirect_stdout(buf), redirect_stderr(buf):
        ok = _process_single_image(
            path,
            _output_for(path, outdir),
            method,
            palette_name,
            height_cap,
            resample_name,
            debug,
        )
    return ok, buf.getvalue()


def _collect_folder(src: Path) -> List[Path]:
    files = [
        p
        for p in src.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not p.stem.endswith(OUTPUT_SUFFIX)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Entry point


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point. Returns the process exit code.

    Handles a single file or a folder. In folder mode supports --jobs
    parallelism (one worker process per file) while keeping output in input order.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    print_config_line(
        "run",
        [("Method", args.method), ("Palette", args.palette), ("Jobs", args.jobs)],
        debug=False,
    )
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [("Height cap", args.height or "-"), ("Resample", args.resample)]
            )
        )

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    if not src.is_dir():
        ok = _process_single_image(
            src,
            args.out,
            args.method,
            args.palette,
            args.height,
            args.resample,
            args.debug,
        )
        return 0 if ok else 2

    files = _collect_folder(src)
    if not files:
        warn(f"no images found in {src}")
    if args.out is not None:
        try:
            args.out.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error(f"cannot create output folder {args.out}: {e}")
            return 2
    if args.debug:
        debug_log(
            key_value_pairs_to_string([("Images", len(files)), ("Jobs", args.jobs)])
        )

    jobs = [
        (p, args.out, args.method, args.palette, args.height, args.resample, args.debug)
        for p in files
    ]
    if args.jobs <= 1:
        results = [
            _process_single_image(p, _output_for(p, out), *rest)
            for p, out, *rest in jobs
        ]
    else:
        with ProcessPoolExecutor(max_workers=args.jobs) as ex:
            futures = [ex.submit(_process_one_captured, *job) for job in jobs]
            blocks = [f.result() for f in futures]
        print("".join(text for _ok, text in blocks), end="", flush=True)
        results = [ok for ok, _text in blocks]

    failed = results.count(False)
    if failed:
        error(f"{failed} of {len(results)} file(s) failed")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
