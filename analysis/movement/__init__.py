"""Public exports for the movement detection package."""

from __future__ import annotations

from .config import load_config
from .control import ControlBuffer, ControlMatch, SearchOutcome, find_first_below
from .engine import MovementDetector
from .events import MovementEvent, MovementEventBuilder, MovementEventConfig
from .model import (
    PSNR_CEILING,
    ConfigError,
    DetectorConfig,
    FrameOrderError,
    InvalidFrameError,
    MovementResult,
)
from .sidecar import MovementSidecarWriter
from .similarity import psnr

__all__ = [
    "MovementDetector",
    "MovementResult",
    "DetectorConfig",
    "load_config",
    "ControlBuffer",
    "ControlMatch",
    "SearchOutcome",
    "find_first_below",
    "psnr",
    "PSNR_CEILING",
    "MovementEvent",
    "MovementEventBuilder",
    "MovementEventConfig",
    "MovementSidecarWriter",
    "InvalidFrameError",
    "FrameOrderError",
    "ConfigError",
]
