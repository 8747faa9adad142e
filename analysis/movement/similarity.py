"""Peak signal-to-noise ratio used to compare thumbnails.

Higher scores mean more similar buffers. Values above ~30 dB indicate
near-identical images; the closer to zero, the more has changed.
Identical buffers score ``PSNR_CEILING``.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .model import PSNR_CEILING, InvalidFrameError

_SSE_EPSILON = 1e-10


def _check_comparable(a: Optional[np.ndarray], b: Optional[np.ndarray]) -> None:
    if a is None or b is None or a.size == 0 or b.size == 0:
        raise InvalidFrameError("cannot compare an empty image")
    if a.dtype != b.dtype or a.shape != b.shape:
        raise InvalidFrameError(
            f"images cannot be compared: {a.shape}/{a.dtype} vs {b.shape}/{b.dtype}"
        )


def sum_squared_error(a: np.ndarray, b: np.ndarray) -> float:
    """Sum of |a - b|^2 over every pixel and channel."""
    _check_comparable(a, b)
    # float64 so the squares of 8-bit differences don't overflow
    diff = np.abs(a.astype(np.float64) - b.astype(np.float64))
    return float(np.sum(diff * diff))


def psnr(a: np.ndarray, b: np.ndarray) -> float:
    """
    Compare two equally-sized, equally-typed buffers.

    Parameters
    ----------
    a, b:
        Images of identical shape and dtype, typically BGR ``uint8``
        thumbnails.

    Returns
    -------
    float
        PSNR in dB, ``>= 0``; ``PSNR_CEILING`` (infinity) only for identical
        buffers.

    Raises
    ------
    InvalidFrameError
        If either buffer is empty or the two differ in dtype, channel
        count, width or height.
    """
    sse = sum_squared_error(a, b)
    if sse <= _SSE_EPSILON:
        return PSNR_CEILING

    mse = sse / float(a.size)  # a.size == channels * pixel count
    return 10.0 * math.log10((255.0 * 255.0) / mse)
