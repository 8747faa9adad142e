from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .model import MovementResult


@dataclass
class MovementEvent:
    """
    A run of consecutive frames with movement.

    Opened by a transition into movement and closed by the transition
    back out of it.
    """

    start_index: int
    stop_index: int  # last frame index that still showed movement

    # Wall-clock epoch-ms of the first and last movement frames.
    start_ms: float
    stop_ms: float

    # Lowest similarity score seen in the window (i.e. the strongest change).
    min_score: Optional[float]

    # Number of movement frames in the window.
    frames: int = 1


@dataclass
class MovementEventConfig:
    """
    Configuration for the MovementEventBuilder.

    Defaults emit every movement run as its own event.
    """

    # Runs shorter than this many movement frames are dropped.
    min_event_frames: int = 1

    # Runs separated by at most this many frame indices are merged.
    merge_gap_frames: int = 0


def _min_score(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


class MovementEventBuilder:
    """
    Turn a stream of MovementResult into MovementEvent windows.

    API:
        builder = MovementEventBuilder(MovementEventConfig())
        events = builder.consume(result)   # list[MovementEvent]
        final_events = builder.flush()     # at end of stream
    """

    def __init__(self, config: Optional[MovementEventConfig] = None) -> None:
        self._cfg = config or MovementEventConfig()

        # Active run (movement still ongoing).
        self._active: Optional[MovementEvent] = None

        # Last completed event that may still merge with the next one.
        self._pending_event: Optional[MovementEvent] = None

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _merge_or_buffer(self, ev: MovementEvent, out: List[MovementEvent]) -> None:
        if self._pending_event is None:
            self._pending_event = ev
            return

        pending = self._pending_event
        gap = ev.start_index - pending.stop_index - 1
        if gap <= self._cfg.merge_gap_frames:
            self._pending_event = MovementEvent(
                start_index=pending.start_index,
                stop_index=ev.stop_index,
                start_ms=pending.start_ms,
                stop_ms=ev.stop_ms,
                min_score=_min_score(pending.min_score, ev.min_score),
                frames=pending.frames + ev.frames,
            )
        else:
            out.append(pending)
            self._pending_event = ev

    def _finalise_pending_if_far(self, index: int, out: List[MovementEvent]) -> None:
        if self._pending_event is None:
            return
        if index - self._pending_event.stop_index > self._cfg.merge_gap_frames:
            out.append(self._pending_event)
            self._pending_event = None

    def _close_active(self, out: List[MovementEvent]) -> None:
        ev = self._active
        self._active = None
        if ev is not None and ev.frames >= self._cfg.min_event_frames:
            self._merge_or_buffer(ev, out)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def consume(self, res: MovementResult) -> List[MovementEvent]:
        """
        Consume a single MovementResult and return any completed MovementEvents.

        Most calls will return [], and occasionally [event].
        """
        out: List[MovementEvent] = []

        if res.is_movement:
            if self._active is None:
                self._active = MovementEvent(
                    start_index=res.frame_index,
                    stop_index=res.frame_index,
                    start_ms=res.ts_ms,
                    stop_ms=res.ts_ms,
                    min_score=res.score,
                )
            else:
                self._active.stop_index = res.frame_index
                self._active.stop_ms = res.ts_ms
                self._active.min_score = _min_score(self._active.min_score, res.score)
                self._active.frames += 1
        elif self._active is not None:
            self._close_active(out)

        if self._active is None:
            self._finalise_pending_if_far(res.frame_index, out)
        return out

    def flush(self) -> List[MovementEvent]:
        """
        Finalise any in-flight event and return all remaining events.

        Call this once at end-of-stream to avoid dropping a trailing event.
        """
        out: List[MovementEvent] = []
        self._close_active(out)
        if self._pending_event is not None:
            out.append(self._pending_event)
            self._pending_event = None
        return out
