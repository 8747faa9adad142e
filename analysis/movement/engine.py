"""Movement detector for sequential video frames.

Each frame is reduced to a small thumbnail and compared (PSNR) against a
handful of recently retained *control* thumbnails. A score below the
configured threshold against any of them means the frame shows movement.

The detector keeps mutable per-stream state (control thumbnails, counters,
mask and annotated output) and is not safe to call from several threads at
once; use one `MovementDetector` per stream.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, overload

import numpy as np

from common.frame import Frame
from common.time import now_ms

from .annotate import annotate, mask_bounding_box
from .control import ControlBuffer, find_first_below
from .mask import blank_mask, mask_area_fraction, movement_mask
from .model import DetectorConfig, FrameOrderError, InvalidFrameError, MovementResult
from .thumbnail import reduce, simple_colour_balance, thumbnail_size

_LOG = logging.getLogger(__name__)


def _check_frame(image: Any) -> np.ndarray:
    if image is None or not isinstance(image, np.ndarray) or image.size == 0:
        raise InvalidFrameError("cannot detect movement using an empty image")
    if image.ndim != 3 or image.shape[2] != 3:
        raise InvalidFrameError(f"expected a 3-channel (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise InvalidFrameError(f"expected an 8-bit image, got dtype {image.dtype}")
    return image


class MovementDetector:
    """Stateful, control-frame based movement detector.

    Typical use::

        det = MovementDetector(DetectorConfig(bbox_enabled=True))
        for img in frames:
            if det.detect(img) and det.transition_detected:
                ...
            show(det.output)

    Observable state after each call: ``movement_detected``,
    ``transition_detected``, ``most_recent_similarity_score``,
    ``frame_index_with_movement``, ``movement_last_detected`` and, when
    enabled, ``mask`` and ``output``.

    ``config`` stays the caller's object and is re-read on every call;
    ``effective_config`` is the normalized copy the last call ran with.
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._log = logger or _LOG
        self.config = config or DetectorConfig()
        self._effective_config = self.config.normalized()
        self._control = ControlBuffer(self._effective_config.control_capacity)
        self._reset_state()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _reset_state(self) -> None:
        self._control.clear()
        self.movement_detected: bool = False
        self.transition_detected: bool = False
        self.next_frame_index: int = 0
        self.next_key_frame_index: int = 0
        self.most_recent_similarity_score: Optional[float] = None
        self.frame_index_with_movement: int = 0
        self.movement_last_detected: Optional[float] = None  # epoch ms
        self.thumbnail_size: Optional[tuple[int, int]] = None  # (width, height)

        # Derived outputs: None means "cleared", an array means "valid".
        self.mask: Optional[np.ndarray] = None
        self.output: Optional[np.ndarray] = None
        self.last_result: Optional[MovementResult] = None

    def _process(self, index: int, image: Any) -> MovementResult:
        image = _check_frame(image)
        index = int(index)
        if index < 0:
            raise FrameOrderError(f"frame index must be non-negative, got {index}")
        if index < self.next_frame_index:
            raise FrameOrderError(
                f"frame index {index} is behind the next expected index {self.next_frame_index}"
            )

        cfg = self.config.normalized()
        frame_h, frame_w = image.shape[:2]
        frame_size = (int(frame_w), int(frame_h))

        size = self.thumbnail_size
        if size is None:
            size = thumbnail_size(image.shape, cfg.thumbnail_ratio, cfg.thumbnail_width)
            self._log.debug(
                "thumbnail size %dx%d for %dx%d frames", size[0], size[1], frame_w, frame_h
            )

        src = simple_colour_balance(image) if cfg.colour_balance else image
        thumbnail = reduce(src, size)

        # capacity changes only drop the oldest control frames
        if self._control.capacity != cfg.control_capacity:
            dropped = self._control.resize(cfg.control_capacity)
            if dropped:
                self._log.debug("control capacity now %d, dropped %s", cfg.control_capacity, dropped)

        # --- outputs are computed first, state is committed after ---

        outcome = find_first_below(
            self._control.iterate_most_recent_first(),
            thumbnail,
            cfg.similarity_threshold,
        )
        movement = outcome.match is not None

        mask = self.mask
        if movement and cfg.mask_enabled:
            mask = movement_mask(
                outcome.match.thumbnail,
                thumbnail,
                frame_size,
                iterations=cfg.mask_iterations,
            )

        transition = movement != self.movement_detected

        if cfg.mask_enabled and (
            mask is None
            or mask.shape != (frame_h, frame_w)
            or (transition and not movement)
        ):
            # never hand out a stale movement mask once movement has ended
            mask = blank_mask(frame_size)

        output = self.output
        if cfg.contours_enabled or cfg.bbox_enabled:
            output = annotate(
                image,
                mask,
                contours=cfg.contours_enabled,
                bbox=cfg.bbox_enabled,
                line_type=cfg.line_type,
                contours_thickness=cfg.contours_thickness,
                bbox_thickness=cfg.bbox_thickness,
                contours_colour=cfg.contours_colour,
                bbox_colour=cfg.bbox_colour,
            )

        ts_ms = now_ms()

        # --- commit ---

        self._effective_config = cfg
        self.thumbnail_size = size
        self.movement_detected = movement
        self.transition_detected = transition
        if outcome.last_score is not None:
            self.most_recent_similarity_score = outcome.last_score
        if movement:
            self.frame_index_with_movement = index
            self.movement_last_detected = ts_ms
        self.mask = mask if cfg.mask_enabled else None
        self.output = output if (cfg.contours_enabled or cfg.bbox_enabled) else None

        if transition:
            self._log.debug(
                "frame %d: movement %s (score=%.2f)",
                index,
                "started" if movement else "stopped",
                self.most_recent_similarity_score or 0.0,
            )

        if index >= self.next_key_frame_index or not self._control.is_full():
            dropped = self._control.retain(index, thumbnail)
            if dropped:
                self._log.debug("frame %d retained, evicted control frames %s", index, dropped)
            self.next_key_frame_index = index + cfg.key_frame_interval

        self.next_frame_index = index + 1

        has_mask = cfg.mask_enabled and self.mask is not None
        result = MovementResult(
            is_movement=movement,
            transition=transition,
            frame_index=index,
            score=outcome.last_score,
            ts_ms=ts_ms,
            matched_index=outcome.match.index if movement else None,
            bbox=mask_bounding_box(self.mask) if has_mask else None,
            mask_area_frac=mask_area_fraction(self.mask) if has_mask else 0.0,
        )
        self.last_result = result
        return result

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def control(self) -> ControlBuffer:
        return self._control

    @property
    def effective_config(self) -> DetectorConfig:
        """Normalized configuration: clamped knobs, mask forced on by contours/bbox."""
        return self._effective_config

    @property
    def mask_valid(self) -> bool:
        return self.mask is not None

    @property
    def output_valid(self) -> bool:
        return self.output is not None

    def empty(self) -> bool:
        """True when there are no control frames to compare against."""
        return self._control.empty()

    def clear(self, keep_config: bool = False) -> MovementDetector:
        """Drop all control frames and state so the detector can be reused.

        Configuration goes back to the defaults unless ``keep_config`` is set.
        """
        if not keep_config:
            self.config = DetectorConfig()
        self._effective_config = self.config.normalized()
        self._reset_state()
        self._control.resize(self._effective_config.control_capacity)
        return self

    @overload
    def detect(self, image: np.ndarray, *, index: Optional[int] = None) -> bool: ...

    @overload
    def detect(self, frame_index: int, image: np.ndarray) -> bool: ...

    def detect(self, *args: Any, index: Optional[int] = None) -> bool:
        """Detect whether the next image shows movement.

        ``detect(image)`` assumes the image directly follows the previous
        one (index ``next_frame_index``). ``detect(frame_index, image)`` and
        ``detect(image, index=frame_index)`` take an explicit index, which
        must be >= ``next_frame_index``; skipping ahead is fine, going backwards raises `FrameOrderError`.

        Raises
        ------
        InvalidFrameError
            If the image is empty or not an 8-bit, 3-channel array.

        On error the detector state is left untouched.
        """
        if len(args) == 1:
            image = args[0]
            if index is None:
                index = self.next_frame_index
        elif len(args) == 2:
            if index is not None:
                raise TypeError("detect() got the frame index both positionally and as index=")
            index, image = args
        else:
            raise TypeError(f"detect() takes an image or (frame_index, image), got {len(args)} args")
        return self._process(index, image).is_movement

    def step(self, frame: Frame) -> MovementResult:
        """Process a `common.frame.Frame`, using its ``frame_id`` as the index."""
        return self._process(frame.frame_id, frame.img)
