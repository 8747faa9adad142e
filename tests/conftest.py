# tests/conftest.py
from __future__ import annotations

import os
import sys

import numpy as np
import pytest

# pytest-dotenv has already loaded .env at this point
pp = os.getenv("PYTHONPATH")
if pp:
    for p in pp.split(os.pathsep):
        if p:
            sys.path.insert(0, p)


@pytest.fixture
def make_frame():
    """Factory for solid BGR frames, optionally with a filled rectangle (x0, y0, x1, y1)."""

    def _make(h=120, w=160, bgr=(60, 60, 60), rect=None, rect_bgr=(250, 250, 250)):
        img = np.zeros((h, w, 3), dtype=np.uint8)
        img[:, :] = bgr
        if rect is not None:
            x0, y0, x1, y1 = rect
            img[y0:y1, x0:x1] = rect_bgr
        return img

    return _make
