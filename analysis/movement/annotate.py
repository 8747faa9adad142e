from __future__ import annotations

from typing import Optional

import cv2
import numpy as np


def external_contours(mask: np.ndarray) -> list[np.ndarray]:
    """Outermost contours of the mask; holes and anything inside them are skipped."""
    contours, _hierarchy = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours)


def mask_bounding_box(mask: np.ndarray) -> Optional[tuple[int, int, int, int]]:
    """(x, y, w, h) enclosing every non-zero mask pixel, or None for an empty mask."""
    points = cv2.findNonZero(mask)
    if points is None:
        return None
    x, y, w, h = cv2.boundingRect(points)
    return int(x), int(y), int(w), int(h)


def annotate(
    frame: np.ndarray,
    mask: np.ndarray,
    *,
    contours: bool = False,
    bbox: bool = False,
    line_type: int = cv2.LINE_4,
    contours_thickness: int = 1,
    bbox_thickness: int = 1,
    contours_colour: tuple[int, int, int] = (0, 0, 255),
    bbox_colour: tuple[int, int, int] = (0, 255, 255),
) -> np.ndarray:
    """Copy ``frame`` and draw the mask's contours and/or bounding box onto it."""
    output = frame.copy()

    if contours:
        polys = external_contours(mask)
        if polys:
            cv2.polylines(output, polys, True, contours_colour, contours_thickness, line_type)

    if bbox:
        box = mask_bounding_box(mask)
        if box is not None:
            x, y, w, h = box
            cv2.rectangle(
                output,
                (x, y),
                (x + w - 1, y + h - 1),
                bbox_colour,
                bbox_thickness,
                line_type,
            )

    return output
