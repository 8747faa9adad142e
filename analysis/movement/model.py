from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

import cv2

# Score reported for buffers that are effectively identical (SSE ~ 0).
# Any real difference scores a finite value, so this stays the unique maximum.
PSNR_CEILING = math.inf

MIN_THUMBNAIL_RATIO = 0.01
MAX_THUMBNAIL_RATIO = 1.0


class InvalidFrameError(ValueError):
    """Raised for empty frames or buffers that cannot be compared."""


class FrameOrderError(ValueError):
    """Raised when an explicit frame index goes backwards."""


class ConfigError(ValueError):
    """Raised when a configuration override cannot be applied."""


@dataclass
class DetectorConfig:
    """
    Configuration knobs for the movement detector.

    Defaults give a cheap detector suitable for "is anything moving?"
    decisions. When the mask, contours or bounding box are displayed,
    lower ``key_frame_interval`` and raise ``control_capacity`` so the
    control frames stay close to the current frame.
    """

    # Scores (PSNR, dB) below this threshold count as movement.
    similarity_threshold: float = 32.0

    # Minimum number of frame indices between admissions into the control buffer.
    key_frame_interval: int = 10

    # Number of control thumbnails kept for comparison.
    control_capacity: int = 4

    # Thumbnail sizing: fixed width when > 0, otherwise a ratio of the frame.
    thumbnail_ratio: float = 0.05
    thumbnail_width: int = 0

    # Simple colour balancing before reduction (off by default, costs a sort per channel).
    colour_balance: bool = False

    # Derived outputs
    mask_enabled: bool = False
    contours_enabled: bool = False
    bbox_enabled: bool = False
    mask_iterations: int = 10  # dilate/erode iterations used to close the mask

    # Drawing
    line_type: int = cv2.LINE_4  # cv2.LINE_AA for anti-aliased lines
    contours_thickness: int = 1
    bbox_thickness: int = 1
    contours_colour: tuple[int, int, int] = (0, 0, 255)  # BGR red
    bbox_colour: tuple[int, int, int] = (0, 255, 255)  # BGR yellow

    def normalized(self) -> DetectorConfig:
        """
        Return a copy with dependent flags resolved and knobs clamped.

        Contours and bounding boxes are drawn from the mask, so enabling
        either one turns the mask on.
        """
        ratio = min(MAX_THUMBNAIL_RATIO, max(MIN_THUMBNAIL_RATIO, float(self.thumbnail_ratio)))
        return replace(
            self,
            similarity_threshold=float(self.similarity_threshold),
            key_frame_interval=max(0, int(self.key_frame_interval)),
            control_capacity=max(1, int(self.control_capacity)),
            thumbnail_ratio=ratio,
            thumbnail_width=max(0, int(self.thumbnail_width)),
            mask_enabled=bool(self.mask_enabled or self.contours_enabled or self.bbox_enabled),
            mask_iterations=max(0, int(self.mask_iterations)),
            contours_thickness=max(1, int(self.contours_thickness)),
            bbox_thickness=max(1, int(self.bbox_thickness)),
        )


@dataclass
class MovementResult:
    """
    Per-frame summary of a detector call.

    The detector's public attributes hold the same information; this is
    the compact form handed to downstream consumers (event builder,
    sidecar writer) so they don't need a reference to the detector.
    """

    is_movement: bool
    transition: bool
    frame_index: int
    score: Optional[float]  # None when there were no control frames to compare against
    ts_ms: float  # wall-clock epoch ms of the call

    matched_index: Optional[int] = None  # control frame that revealed the movement
    bbox: Optional[tuple[int, int, int, int]] = None  # (x, y, w, h) in frame coords
    mask_area_frac: float = 0.0
