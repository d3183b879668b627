#!/usr/bin/env python3
"""
Apply a Catalog Transform to Image Files
========================================
Runs one catalog entry (optionally followed by a single-value threshold)
over a file or a directory of images and writes the results as PNG.
Frames that fail are logged and skipped.

Usage:
    python -m imgtransform --list
    python -m imgtransform kymos/ --transform R2MINUS_GB --output-dir out/
    python -m imgtransform kymos/ --label "2R-(G+B)" --threshold 40
    python -m imgtransform frames/ --transform SUBTRACT_REF --background ref.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from tqdm import tqdm

from .cache import ArrayCache
from .errors import TransformError
from .options import TransformOptions
from .registry import (
    CATEGORY_NAMES,
    TRANSFORM_REGISTRY,
    apply_transform,
    find_by_label,
)
from .utils import discover_images, load_image, save_image, setup_logging


def list_transforms(logger: logging.Logger) -> None:
    current = None
    for key, meta in TRANSFORM_REGISTRY.items():
        if meta['cat'] != current:
            current = meta['cat']
            logger.info(f"\n{CATEGORY_NAMES[current]}")
        logger.info(f"  {key:<20s} {meta['label']}")


def build_options(args) -> TransformOptions:
    options = TransformOptions(copy_to_3_planes=not args.no_copy_planes)
    if args.threshold is not None:
        options.set_single_threshold(args.threshold, not args.below)
    if args.weights is not None:
        options.weights = tuple(args.weights)
    if args.span is not None:
        options.span_diff = args.span
    if args.background is not None:
        options.background_image = load_image(args.background)
    return options


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="imgtransform",
        description="Apply an image transform from the catalog to image files")
    parser.add_argument("input", nargs="?", default=None,
                        help="Image file or directory of images")
    parser.add_argument("--list", action="store_true",
                        help="List catalog keys and labels, then exit")
    parser.add_argument("--transform", type=str, default=None,
                        help="Catalog key (see --list)")
    parser.add_argument("--label", type=str, default=None,
                        help="Catalog display label, as an alternative to --transform")
    parser.add_argument("--output-dir", type=str, default="transformed")
    parser.add_argument("--threshold", type=int, default=None,
                        help="Apply a single-value threshold to the result")
    parser.add_argument("--below", action="store_true",
                        help="Invert the threshold mask polarity")
    parser.add_argument("--background", type=str, default=None,
                        help="Reference image for the subtraction transforms")
    parser.add_argument("--weights", type=float, nargs=3, default=None,
                        help="Weights for the aR+bG+cB entry")
    parser.add_argument("--span", type=int, default=None,
                        help="Override the window of the difference operators")
    parser.add_argument("--no-copy-planes", action="store_true",
                        help="Leave planes 1-2 empty for single-plane results")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    if args.list:
        list_transforms(setup_logging('imgtransform', level=level))
        return 0

    if args.input is None:
        parser.error("an input file or directory is required")
    key = args.transform
    if args.label is not None:
        key = find_by_label(args.label)
        if key is None:
            parser.error(f"unknown label: {args.label!r}")
    if key is None:
        parser.error("one of --transform or --label is required")
    if key not in TRANSFORM_REGISTRY:
        parser.error(f"unknown transform: {key!r}")

    output_dir = Path(args.output_dir)
    logger = setup_logging('imgtransform', output_dir=output_dir, level=level)

    paths = discover_images(args.input)
    if not paths:
        logger.error(f"No images found: {args.input}")
        return 1

    try:
        options = build_options(args)
    except ValueError as e:
        logger.error(str(e))
        return 1
    threshold_key = 'THRESHOLD_SINGLE' if args.threshold is not None else None

    logger.info(f"Transform:  {key} ({TRANSFORM_REGISTRY[key]['label']})")
    logger.info(f"Images:     {len(paths)}")
    logger.info(f"Output:     {output_dir}")

    cache = ArrayCache()
    t0 = time.time()
    success, failed = 0, 0
    for path in tqdm(paths, desc=f"Applying {key}"):
        try:
            image = load_image(path)
            result = apply_transform(image, options, key, threshold_key=threshold_key, cache=cache)
            save_image(output_dir / f"{path.stem}_{key}.png", result)
            success += 1
        except (TransformError, ValueError) as e:
            logger.warning(f"Skipping {path.name}: {e}")
            failed += 1
        finally:
            cache.clear()

    elapsed = time.time() - t0
    logger.info(f"Done in {elapsed:.1f}s: {success} written, {failed} failed")
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
