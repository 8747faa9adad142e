from __future__ import annotations

from pathlib import Path

import numpy as np

from analysis.movement import (
    DetectorConfig,
    MovementDetector,
    MovementEventBuilder,
    MovementSidecarWriter,
)
from common.frame import Frame
from sidecar.reader import SidecarReader


def _frame(idx: int, moving: bool) -> Frame:
    img = np.full((120, 160, 3), 60, dtype=np.uint8)
    if moving:
        img[20:100, 40:120] = (250, 250, 250)
    return Frame(img=img, frame_id=idx)


def test_detector_output_to_sidecar(tmp_path: Path):
    cfg = DetectorConfig(bbox_enabled=True)
    det = MovementDetector(cfg)
    builder = MovementEventBuilder()
    path = tmp_path / "movement.jsonl"

    pattern = [False] * 4 + [True] * 3 + [False] * 2
    with MovementSidecarWriter(path) as sidecar:
        sidecar.write_meta(det.config, source="synthetic")
        for idx, moving in enumerate(pattern):
            res = det.step(_frame(idx, moving))
            sidecar.write_result(res)
            for ev in builder.consume(res):
                sidecar.write_event(ev)
        for ev in builder.flush():
            sidecar.write_event(ev)

    meta = list(SidecarReader(path, record_type="meta"))
    assert len(meta) == 1
    assert meta[0]["source"] == "synthetic"
    assert meta[0]["config"]["bbox_enabled"] is True

    frames = list(SidecarReader(path, record_type="movement_frame"))
    assert [f["movement"] for f in frames] == pattern
    assert [f["frame"] for f in frames if f["transition"]] == [4, 7]
    assert frames[0]["score"] is None
    assert frames[4]["bbox"] is not None and len(frames[4]["bbox"]) == 4
    assert frames[8]["bbox"] is None

    events = list(SidecarReader(path, record_type="movement_event"))
    assert len(events) == 1
    assert (events[0]["start_index"], events[0]["stop_index"]) == (4, 6)
    assert events[0]["frames"] == 3
    assert events[0]["start_iso"].endswith("+00:00")
