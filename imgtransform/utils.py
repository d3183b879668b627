#!/usr/bin/env python3
"""
Shared Utilities for the Command Line
=====================================
File and logging helpers used by ``python -m imgtransform``.  The
transform modules themselves never touch the filesystem.

Functions
---------
discover_images
    List image files in a directory (or accept a single file).
load_image
    Read an image file into an RGB-ordered Image.
save_image
    Write an Image to disk, converting to an OpenCV-writable dtype.
setup_logging
    Configure logging to console + optional file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import cv2
import numpy as np

from .image import Image

IMAGE_SUFFIXES = ('.png', '.jpg', '.jpeg', '.tif', '.tiff', '.bmp')


def discover_images(path: Path | str, suffixes: tuple[str, ...] = IMAGE_SUFFIXES) -> list[Path]:
    """Return the image files under *path*, sorted by name.

    A path to a single file is returned as a one-element list whatever
    its suffix.
    """
    path = Path(path)
    if path.is_file():
        return [path]
    if not path.is_dir():
        return []
    return sorted(p for p in path.iterdir() if p.suffix.lower() in suffixes)


def load_image(path: Path | str) -> Image:
    """Read *path* with OpenCV, keeping its bit depth.

    Colour images are reordered from OpenCV's BGR(A) to RGB(A) so that
    channel 0 is red.

    Raises
    ------
    ValueError
        If the file cannot be decoded.
    """
    data = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if data is None:
        raise ValueError(f"Could not read image: {path}")
    if data.ndim == 3 and data.shape[2] == 3:
        data = cv2.cvtColor(data, cv2.COLOR_BGR2RGB)
    elif data.ndim == 3 and data.shape[2] == 4:
        data = cv2.cvtColor(data, cv2.COLOR_BGRA2RGBA)
    return Image(data)


def save_image(path: Path | str, image: Image) -> Path:
    """Write *image* to *path*, creating parent directories.

    uint8 and uint16 data are written as-is.  Other dtypes are clipped to
    [0, 255] and written as uint8 (HSB/HSV planes are already in
    [0, 100]).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = image.data
    if data.dtype not in (np.uint8, np.uint16):
        data = np.clip(np.nan_to_num(data), 0, 255).astype(np.uint8)
    if data.shape[2] == 1:
        data = data[:, :, 0]
    elif data.shape[2] == 3:
        data = cv2.cvtColor(data, cv2.COLOR_RGB2BGR)
    elif data.shape[2] == 4:
        data = cv2.cvtColor(data, cv2.COLOR_RGBA2BGRA)

    if not cv2.imwrite(str(path), data):
        raise ValueError(f"Could not write image: {path}")
    return path


# ── Logging ───────────────────────────────────────────────────────────────

CONSOLE_FORMAT = '%(message)s'
FILE_FORMAT = '%(asctime)s %(name)s %(levelname)-7s %(message)s'


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for h in logger.handlers:
        if type(h) is logging.StreamHandler:
            return h
    return None


def _file_handler(logger: logging.Logger, log_path: Path) -> logging.Handler | None:
    target = str(log_path.resolve())
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and h.baseFilename == target:
            return h
    return None


def setup_logging(name: str, output_dir: Path | str | None = None,
                  level: int = logging.INFO) -> logging.Logger:
    """Attach the CLI's handlers to logger *name* and return it.

    Progress messages go to stdout at *level*.  With *output_dir*, every
    record down to DEBUG is also written to ``{output_dir}/{name}.log``
    so failed frames can be traced after a batch run.  Repeated calls
    update the console level and never add a second handler.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    console = _console_handler(logger)
    if console is None:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)
    console.setLevel(level)

    if output_dir is None:
        return logger

    log_path = Path(output_dir) / f'{name}.log'
    if _file_handler(logger, log_path) is None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(handler)
    return logger
