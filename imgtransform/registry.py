#!/usr/bin/env python3
"""
Transform Catalog
=================
Fixed, ordered catalog of named transform instances, built once at import.
Each entry has a display label (shown in selectors, used for reverse
lookup) and a category.

Categories:
    A - Channel combinations
    B - Colour spaces
    C - Differences and edges
    D - Reference subtraction
    E - Thresholds
    F - Sorts
    G - Pass-through

Usage:
    from imgtransform.registry import apply_transform
    result = apply_transform(image, options, "R2MINUS_GB", threshold_key="THRESHOLD_SINGLE")
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from .base import BaseTransform
from .cache import ArrayCache
from .color import (
    H1H2H3,
    L1DistanceToColumn,
    LinearCombination,
    LinearCombinationNormed,
    RGBtoHSB,
    RGBtoHSV,
    SumDiff,
)
from .config import DEFAULT_DERICHE_ALPHA, EQUAL_WEIGHTS
from .deriche import Deriche
from .difference import XDiffn, XYDiffn, YDifferenceL, YDiffn, YDiffn1D
from .errors import InvalidParameterError, TransformError
from .image import Image
from .options import TransformOptions
from .sorting import SortChan0Column0, SortChan0Columns, SortSumDiffColumns
from .subtraction import (
    ImageMinusBackground,
    RemoveHorizontalAverage,
    SubtractColumn,
    SubtractReferenceImage,
)
from .threshold import ThresholdColors, ThresholdSingleValue

_log = logging.getLogger(__name__)


class NoTransform(BaseTransform):
    """Identity: returns a copy of the source image."""

    def _execute(self, image, options, cache):
        return Image(image.data.copy())


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

TRANSFORM_REGISTRY = OrderedDict([
    ('R_RGB',              {'cat': 'A', 'label': 'R(RGB)',            'fn': LinearCombination((1, 0, 0))}),
    ('G_RGB',              {'cat': 'A', 'label': 'G(RGB)',            'fn': LinearCombination((0, 1, 0))}),
    ('B_RGB',              {'cat': 'A', 'label': 'B(RGB)',            'fn': LinearCombination((0, 0, 1))}),
    ('R2MINUS_GB',         {'cat': 'A', 'label': '2R-(G+B)',          'fn': LinearCombination((2, -1, -1))}),
    ('G2MINUS_RB',         {'cat': 'A', 'label': '2G-(R+B)',          'fn': LinearCombination((-1, 2, -1))}),
    ('B2MINUS_RG',         {'cat': 'A', 'label': '2B-(R+G)',          'fn': LinearCombination((-1, -1, 2))}),
    ('GBMINUS_2R',         {'cat': 'A', 'label': '(G+B)-2R',          'fn': LinearCombination((-2, 1, 1))}),
    ('RBMINUS_2G',         {'cat': 'A', 'label': '(R+B)-2G',          'fn': LinearCombination((1, -2, 1))}),
    ('RGMINUS_2B',         {'cat': 'A', 'label': '(R+G)-2B',          'fn': LinearCombination((1, 1, -2))}),
    ('RGB_DIFFS',          {'cat': 'A', 'label': 'S(diffRGB)',        'fn': SumDiff()}),
    ('RGB',                {'cat': 'A', 'label': '(R+G+B)/3',         'fn': LinearCombination(EQUAL_WEIGHTS)}),
    ('LINEAR_COMBINATION', {'cat': 'A', 'label': 'aR+bG+cB',          'fn': LinearCombination()}),
    ('NORM_BRMINUSG',      {'cat': 'A', 'label': '|aR+bG+cB|',        'fn': LinearCombinationNormed((-1, 2, -1))}),
    ('L1DIST_TO_1RSTCOL',  {'cat': 'A', 'label': 'L1[t-t0]',          'fn': L1DistanceToColumn(0)}),
    ('H_HSB',              {'cat': 'B', 'label': 'H(HSB)',            'fn': RGBtoHSB(0)}),
    ('S_HSB',              {'cat': 'B', 'label': 'S(HSB)',            'fn': RGBtoHSB(1)}),
    ('B_HSB',              {'cat': 'B', 'label': 'B(HSB)',            'fn': RGBtoHSB(2)}),
    ('H_HSV',              {'cat': 'B', 'label': 'H(HSV)',            'fn': RGBtoHSV(0)}),
    ('S_HSV',              {'cat': 'B', 'label': 'S(HSV)',            'fn': RGBtoHSV(1)}),
    ('V_HSV',              {'cat': 'B', 'label': 'B(HSV)',            'fn': RGBtoHSV(2)}),
    ('RGB_TO_H1H2H3',      {'cat': 'B', 'label': 'H1H2H3',            'fn': H1H2H3()}),
    ('XDIFFN',             {'cat': 'C', 'label': 'XDiffn',            'fn': XDiffn(3)}),
    ('YDIFFN',             {'cat': 'C', 'label': 'YDiffn',            'fn': YDiffn(5)}),
    ('YDIFFN2',            {'cat': 'C', 'label': 'YDiffn_1D',         'fn': YDiffn1D(4)}),
    ('XYDIFFN',            {'cat': 'C', 'label': 'XYDiffn',           'fn': XYDiffn(5)}),
    ('COLORDISTANCE_L1_Y', {'cat': 'C', 'label': 'color dist L1',     'fn': YDifferenceL(0, 0, 4, 0, False)}),
    ('COLORDISTANCE_L2_Y', {'cat': 'C', 'label': 'color dist L2',     'fn': YDifferenceL(0, 0, 5, 0, True)}),
    ('DERICHE',            {'cat': 'C', 'label': 'edge detection',    'fn': Deriche(DEFAULT_DERICHE_ALPHA, True)}),
    ('DERICHE_COLOR',      {'cat': 'C', 'label': "Deriche's edges",   'fn': Deriche(DEFAULT_DERICHE_ALPHA, False)}),
    ('SUBTRACT_T0',        {'cat': 'D', 'label': 't-t0',              'fn': SubtractReferenceImage()}),
    ('SUBTRACT_TM1',       {'cat': 'D', 'label': 't-(t-1)',           'fn': SubtractReferenceImage()}),
    ('SUBTRACT_REF',       {'cat': 'D', 'label': 't-ref',             'fn': SubtractReferenceImage()}),
    ('SUBTRACT',           {'cat': 'D', 'label': 'neg(t-ref)',        'fn': ImageMinusBackground()}),
    ('SUBTRACT_1RSTCOL',   {'cat': 'D', 'label': '[t-t0]',            'fn': SubtractColumn(0)}),
    ('MINUSHORIZAVG',      {'cat': 'D', 'label': 'remove Hz traces',  'fn': RemoveHorizontalAverage()}),
    ('THRESHOLD_SINGLE',   {'cat': 'E', 'label': 'threshold 1 value', 'fn': ThresholdSingleValue()}),
    ('THRESHOLD_COLORS',   {'cat': 'E', 'label': 'threshold colors',  'fn': ThresholdColors()}),
    ('SORT_CHAN0COLS',     {'cat': 'F', 'label': 'sort col/chan0',    'fn': SortChan0Columns()}),
    ('SORT_SUMDIFFCOLS',   {'cat': 'F', 'label': 'sort col/SumDiff',  'fn': SortSumDiffColumns()}),
    ('SORT_CHAN0COL0',     {'cat': 'F', 'label': 'sort rows/col0',    'fn': SortChan0Column0()}),
    ('ZIGZAG',             {'cat': 'G', 'label': 'remove spikes',     'fn': NoTransform()}),
    ('NONE',               {'cat': 'G', 'label': 'none',              'fn': NoTransform()}),
])

_LABEL_INDEX: dict[str, str] = {v['label']: k for k, v in TRANSFORM_REGISTRY.items()}


def get_transform(key: str) -> BaseTransform:
    """Return the catalog instance for *key*; raises ``InvalidParameterError`` if unknown."""
    try:
        return TRANSFORM_REGISTRY[key]['fn']
    except KeyError:
        raise InvalidParameterError("transform_key", key, "Unknown transform") from None


def find_by_label(label: str) -> str | None:
    """Catalog key whose display label is exactly *label*, or None."""
    return _LABEL_INDEX.get(label)


def get_transform_names(categories: list[str] | None = None) -> list[str]:
    if categories is None:
        return list(TRANSFORM_REGISTRY.keys())
    return [k for k, v in TRANSFORM_REGISTRY.items() if v['cat'] in categories]


def get_transform_label(key: str) -> str:
    return TRANSFORM_REGISTRY.get(key, {}).get('label', key)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def apply_transform(image: Image | None, options: TransformOptions | None, key: str | None = None,
                    threshold_key: str | None = None, cache: ArrayCache | None = None) -> Image:
    """Run one catalog transform, then optionally a threshold on its result.

    Parameters
    ----------
    key : str, optional
        Catalog key; defaults to ``options.transform_key``, then ``'NONE'``.
    threshold_key : str, optional
        Second catalog entry applied to the first result (typically
        ``'THRESHOLD_SINGLE'`` or ``'THRESHOLD_COLORS'``).

    Raises
    ------
    TransformError
        From either stage.
    """
    if key is None:
        key = options.transform_key if options is not None and options.transform_key else 'NONE'
    result = get_transform(key).transform(image, options, cache)
    if threshold_key is not None:
        result = get_transform(threshold_key).transform(result, options, cache)
    return result


def compute_all_transforms(image: Image, options: TransformOptions, skip: set[str] | None = None,
                           cache: ArrayCache | None = None) -> OrderedDict[str, Image | None]:
    """Apply every catalog entry to one frame.

    Entries that fail (for example a reference subtraction without a
    background image) are logged and stored as ``None``.

    Returns
    -------
    results : OrderedDict[str, Image or None]
        In catalog order, without the keys in *skip*.
    """
    skip = skip or set()
    if cache is None:
        cache = ArrayCache()

    results = OrderedDict()
    for key, meta in TRANSFORM_REGISTRY.items():
        if key in skip:
            continue
        try:
            results[key] = meta['fn'].transform(image, options, cache)
        except TransformError as e:
            _log.warning("Transform '%s' failed (%s), storing None", key, e)
            results[key] = None
    return results


# ── Derived exports (single source of truth) ─────────────────────────────

TRANSFORM_LABELS: dict[str, str] = {
    k: v['label'] for k, v in TRANSFORM_REGISTRY.items()
}

TRANSFORM_CATEGORIES: dict[str, str] = {
    k: v['cat'] for k, v in TRANSFORM_REGISTRY.items()
}

CATEGORY_NAMES: dict[str, str] = {
    'A': 'Channel Combinations',
    'B': 'Colour Spaces',
    'C': 'Differences and Edges',
    'D': 'Reference Subtraction',
    'E': 'Thresholds',
    'F': 'Sorts',
    'G': 'Pass-through',
}
