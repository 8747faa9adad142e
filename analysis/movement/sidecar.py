from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any

from common.time import to_iso_utc
from sidecar.writer import SidecarWriter

from .events import MovementEvent
from .model import DetectorConfig, MovementResult

SCHEMA = "movedetect.v1"


class MovementSidecarWriter:
    """
    Thin wrapper around SidecarWriter for detector output.

    Writes one JSON object per line, tagged by ``type``:
    ``meta`` (detector configuration), ``movement_frame`` (per-frame
    result) and ``movement_event`` (a closed movement window).
    """

    def __init__(self, path: str | Path):
        self._writer = SidecarWriter(path)

    def __enter__(self) -> MovementSidecarWriter:
        self._writer.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._writer.__exit__(exc_type, exc, tb)

    def write_meta(self, config: DetectorConfig, **extra: Any) -> None:
        payload: dict[str, Any] = {"type": "meta", "schema": SCHEMA, "config": asdict(config)}
        payload.update(extra)
        self._writer.write(payload)

    def write_result(self, res: MovementResult) -> None:
        payload: dict[str, Any] = {
            "type": "movement_frame",
            "frame": int(res.frame_index),
            "movement": bool(res.is_movement),
            "transition": bool(res.transition),
            "score": None if res.score is None else float(res.score),
            "ts_ms": float(res.ts_ms),
            "matched_index": res.matched_index,
            "bbox": None if res.bbox is None else [int(v) for v in res.bbox],
            "mask_area_frac": float(res.mask_area_frac),
        }
        self._writer.write(payload)

    def write_event(self, ev: MovementEvent) -> None:
        payload: dict[str, Any] = {
            "type": "movement_event",
            "start_index": int(ev.start_index),
            "stop_index": int(ev.stop_index),
            "start_ms": float(ev.start_ms),
            "stop_ms": float(ev.stop_ms),
            "start_iso": to_iso_utc(ev.start_ms),
            "stop_iso": to_iso_utc(ev.stop_ms),
            "min_score": None if ev.min_score is None else float(ev.min_score),
            "frames": int(ev.frames),
        }
        self._writer.write(payload)

    def flush(self) -> None:
        self._writer.flush()

    def close(self) -> None:
        self._writer.close()
