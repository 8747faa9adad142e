from __future__ import annotations

import math
from collections.abc import Sequence

import cv2
import numpy as np

from .model import MAX_THUMBNAIL_RATIO, MIN_THUMBNAIL_RATIO, InvalidFrameError


def thumbnail_size(
    frame_shape: Sequence[int],
    ratio: float = 0.05,
    width: int = 0,
) -> tuple[int, int]:
    """
    Work out the (width, height) of the thumbnails for frames of this shape.

    When ``width`` is positive the thumbnail has that fixed width and the
    frame's aspect ratio; otherwise ``ratio`` (clamped to [0.01, 1.0]) is
    applied to both dimensions. Neither side is ever smaller than 1 px.
    """
    rows, cols = int(frame_shape[0]), int(frame_shape[1])
    if rows <= 0 or cols <= 0:
        raise InvalidFrameError(f"cannot size thumbnails for a {cols}x{rows} frame")

    if width and width > 0:
        w = min(int(width), cols)
        h = int(round(float(w) / float(cols) * float(rows)))
        return max(1, w), max(1, h)

    r = min(MAX_THUMBNAIL_RATIO, max(MIN_THUMBNAIL_RATIO, float(ratio)))
    return max(1, int(cols * r)), max(1, int(rows * r))


def reduce(frame: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    # INTER_AREA averages the covered source pixels, which is what we want
    # for heavy downscaling.
    return cv2.resize(frame, size, interpolation=cv2.INTER_AREA)


def simple_colour_balance(frame: np.ndarray, percent: float = 1.0) -> np.ndarray:
    """
    Stretch each channel so its ``percent``/2 tails saturate at 0 and 255.

    Evens out lighting and white-balance differences before thumbnails
    are compared.
    """
    if frame is None or frame.size == 0 or frame.ndim != 3 or frame.shape[2] != 3:
        raise InvalidFrameError("cannot colour balance the given image")

    half = float(percent) / 200.0
    channels = []
    for ch in cv2.split(frame):
        flat = np.sort(ch.reshape(-1))
        n = flat.size
        lo = int(flat[min(n - 1, math.floor(n * half))])
        hi = int(flat[min(n - 1, math.ceil(n * (1.0 - half)))])
        clipped = np.clip(ch, lo, hi)
        channels.append(cv2.normalize(clipped, None, 0, 255, cv2.NORM_MINMAX))
    return cv2.merge(channels)
