"""Long-lived parameter bag shared by every transform call.

Callers (an overlay, a batch series) keep one ``TransformOptions`` around,
adjust it as the user changes settings, and hand it to each frame's
transform.  Transforms only read from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .config import DEFAULT_THRESHOLD
from .image import Image


class DistanceType(IntEnum):
    """Colour distance used by the palette threshold."""
    L2 = 0
    L1 = 1


@dataclass
class TransformOptions:
    """Parameters read by the transforms.

    Attributes
    ----------
    threshold : int
        Single-value threshold, conventionally in [0, 255].
    if_greater : bool
        Direction flag of the single-value threshold.
    transform_key : str or None
        Catalog key of the selected transform (see ``registry``).
    background_image : Image or None
        Reference frame for background/reference subtraction.
    palette : list of (r, g, b)
        Target colours for the colour-palette threshold.
    distance_type : DistanceType
        Metric used against ``palette``.
    color_threshold : int
        Maximum distance for a pixel to match a palette colour.
    weights : tuple of 3 floats
        Channel weights for a linear combination built without weights.
    span_diff : int or None
        Overrides the window of the difference operators when set.
    copy_to_3_planes : bool
        Replicate single computed planes into the two other channels.
    """
    threshold: int = DEFAULT_THRESHOLD
    if_greater: bool = True
    transform_key: str | None = None
    background_image: Image | None = None
    palette: list[tuple[int, int, int]] = field(default_factory=list)
    distance_type: DistanceType = DistanceType.L2
    color_threshold: int = 0
    weights: tuple[float, float, float] = (1.0, 1.0, 1.0)
    span_diff: int | None = None
    copy_to_3_planes: bool = True

    def set_single_threshold(self, threshold: int, if_greater: bool) -> None:
        self.threshold = threshold
        self.if_greater = if_greater

    def set_color_array_threshold(self, distance_type: DistanceType | int, color_threshold: int,
                                  palette: list[tuple[int, int, int]]) -> None:
        """Configure the colour-palette threshold and select it."""
        self.transform_key = "THRESHOLD_COLORS"
        self.distance_type = DistanceType(distance_type)
        self.color_threshold = color_threshold
        self.palette = [tuple(int(v) for v in color) for color in palette]
