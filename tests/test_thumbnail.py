from __future__ import annotations

import numpy as np
import pytest

from analysis.movement import InvalidFrameError
from analysis.movement.thumbnail import reduce, simple_colour_balance, thumbnail_size


def test_ratio_sizing():
    assert thumbnail_size((480, 640, 3), ratio=0.05) == (32, 24)
    assert thumbnail_size((480, 640, 3), ratio=0.25) == (160, 120)


def test_ratio_is_clamped():
    # below 1% -> 1%
    assert thumbnail_size((480, 640, 3), ratio=0.0) == (6, 4)
    assert thumbnail_size((480, 640, 3), ratio=-3.0) == (6, 4)
    # above 100% -> full size
    assert thumbnail_size((480, 640, 3), ratio=5.0) == (640, 480)


def test_tiny_frames_never_get_zero_sized_thumbnails():
    assert thumbnail_size((10, 10, 3), ratio=0.05) == (1, 1)


def test_fixed_width_preserves_aspect():
    assert thumbnail_size((480, 640, 3), width=24) == (24, 18)
    assert thumbnail_size((1080, 1920, 3), width=32) == (32, 18)
    # wider than the frame -> frame width
    assert thumbnail_size((20, 40, 3), width=100) == (40, 20)


def test_bad_shape_is_rejected():
    with pytest.raises(InvalidFrameError):
        thumbnail_size((0, 640, 3))


def test_reduce_shape_and_area_averaging():
    img = np.zeros((40, 60, 3), dtype=np.uint8)
    img[::2, ::2] = 255
    img[1::2, 1::2] = 255  # checkerboard, mean ~127.5

    thumb = reduce(img, (3, 2))
    assert thumb.shape == (2, 3, 3)
    assert thumb.dtype == np.uint8
    assert np.all(thumb >= 126) and np.all(thumb <= 129)


def test_reduce_returns_a_copy():
    img = np.full((20, 20, 3), 9, dtype=np.uint8)
    thumb = reduce(img, (20, 20))
    img[:] = 0
    assert np.all(thumb == 9)


def test_colour_balance_stretches_each_channel():
    ramp = np.linspace(100, 150, 200, dtype=np.uint8)
    img = np.zeros((10, 200, 3), dtype=np.uint8)
    img[:, :, 0] = ramp
    img[:, :, 1] = ramp
    img[:, :, 2] = ramp

    out = simple_colour_balance(img)
    assert out.shape == img.shape
    assert out.dtype == np.uint8
    for c in range(3):
        assert int(out[:, :, c].min()) == 0
        assert int(out[:, :, c].max()) == 255


def test_colour_balance_rejects_non_bgr():
    with pytest.raises(InvalidFrameError):
        simple_colour_balance(np.zeros((10, 10), dtype=np.uint8))
    with pytest.raises(InvalidFrameError):
        simple_colour_balance(np.zeros((0, 0, 3), dtype=np.uint8))
