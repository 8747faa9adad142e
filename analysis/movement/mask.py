from __future__ import annotations

import cv2
import numpy as np


def blank_mask(frame_size: tuple[int, int]) -> np.ndarray:
    """All-background mask for a frame of ``(width, height)``."""
    w, h = frame_size
    return np.zeros((int(h), int(w)), dtype=np.uint8)


def movement_mask(
    control: np.ndarray,
    thumbnail: np.ndarray,
    frame_size: tuple[int, int],
    iterations: int = 10,
) -> np.ndarray:
    """
    Build a binary (0/255) mask of where ``thumbnail`` differs from ``control``.

    The comparison happened at thumbnail resolution, so the tiny
    difference image is scaled up with cubic interpolation into a coarse,
    blurred region rather than a pixel-exact diff. Otsu picks the
    threshold per frame, then a dilate/erode pair merges nearby fragments.
    """
    diff = cv2.absdiff(control, thumbnail)
    diff = cv2.resize(diff, tuple(int(v) for v in frame_size), interpolation=cv2.INTER_CUBIC)
    if diff.ndim == 3:
        diff = cv2.cvtColor(diff, cv2.COLOR_BGR2GRAY)

    _, mask = cv2.threshold(diff, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)

    if iterations and iterations > 0:
        mask = cv2.dilate(mask, None, iterations=int(iterations))
        mask = cv2.erode(mask, None, iterations=int(iterations))
    return mask


def mask_area_fraction(mask: np.ndarray) -> float:
    total_px = int(mask.size)
    if total_px == 0:
        return 0.0
    return float(np.count_nonzero(mask)) / float(total_px)
