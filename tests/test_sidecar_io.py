from __future__ import annotations

from pathlib import Path

import pytest

from sidecar.reader import SidecarReader
from sidecar.writer import SidecarWriter


def test_sidecar_roundtrip(tmp_path: Path):
    path = tmp_path / "sample_movement.jsonl"
    w = SidecarWriter(path)
    w.open()
    w.write({"type": "meta", "schema": "movedetect.v1"})
    w.write({"type": "movement_frame", "frame": 1, "bbox": [10, 10, 20, 20]})
    w.write({"type": "movement_frame", "frame": 2, "bbox": None})
    w.close()
    rows = list(SidecarReader(path))
    assert rows[0]["type"] == "meta"
    assert rows[1]["frame"] == 1 and rows[1]["bbox"] == [10, 10, 20, 20]
    assert rows[2]["frame"] == 2 and rows[2]["bbox"] is None


def test_sidecar_writer_context_manager(tmp_path):
    p = tmp_path / "nested" / "cm.jsonl"
    with SidecarWriter(p) as w:
        assert w.is_open
        w.write_many([{"type": "meta"}, {"type": "movement_frame", "frame": 0}])
    assert not w.is_open
    lines = list(SidecarReader(p))
    assert len(lines) == 2


def test_writer_append_mode(tmp_path):
    p = tmp_path / "append.jsonl"
    with SidecarWriter(p) as w:
        w.write({"n": 1})
    with SidecarWriter(p, append=True) as w:
        w.write({"n": 2})
    assert [r["n"] for r in SidecarReader(p)] == [1, 2]


def test_write_when_closed_raises(tmp_path):
    w = SidecarWriter(tmp_path / "closed.jsonl")
    with pytest.raises(RuntimeError):
        w.write({"n": 1})


def test_reader_skips_torn_lines_and_filters(tmp_path):
    p = tmp_path / "torn.jsonl"
    p.write_text(
        '{"type": "meta"}\n\n[1, 2]\n{"type": "movement_frame", "frame": 3}\n{"type": "movem',
        encoding="utf-8",
    )
    assert len(list(SidecarReader(p))) == 2
    frames = list(SidecarReader(p, record_type="movement_frame"))
    assert frames == [{"type": "movement_frame", "frame": 3}]
