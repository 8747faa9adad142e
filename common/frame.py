from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class Frame:
    img: np.ndarray  # BGR (H,W,3), uint8
    frame_id: int  # sequential index within the stream
    pts_ms: Optional[float] = None  # epoch ms (float), if the source provides one

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) of the image, matching OpenCV's dsize order."""
        h, w = self.img.shape[:2]
        return int(w), int(h)
