# ruff: noqa: UP007  # keep Optional[...] for Py3.9; don't force X | Y
from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from contextlib import suppress
from pathlib import Path
from typing import Any, Optional, TextIO


class SidecarWriter:
    """JSON-lines writer: one object per line, flushed and fsync'd on close."""

    def __init__(self, path: str | Path, append: bool = False):
        self.path = Path(path)
        self._append = append
        self._fh: Optional[TextIO] = None

    def __enter__(self) -> SidecarWriter:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        mode = "a" if self._append else "w"
        self._fh = self.path.open(mode, encoding="utf-8", newline="")

    def write(self, rec: Mapping[str, Any]) -> None:
        if not self._fh:
            raise RuntimeError("SidecarWriter is not open")
        self._fh.write(json.dumps(dict(rec), ensure_ascii=False) + "\n")

    def write_many(self, recs: Iterable[Mapping[str, Any]]) -> None:
        for rec in recs:
            self.write(rec)

    def flush(self) -> None:
        if self._fh:
            self._fh.flush()

    def close(self) -> None:
        if self._fh is not None:
            with suppress(Exception):
                self._fh.flush()
            # Best-effort durability; harmless if underlying file doesn't support fileno()
            with suppress(Exception):
                os.fsync(self._fh.fileno())
            self._fh.close()
            self._fh = None
