from __future__ import annotations

from dataclasses import dataclass, replace

from pycut.timecode import ZERO, TimeCode, add_seconds

BOUND_START = "start"
BOUND_END = "end"

DEFAULT_RANGE_WIDTH_SEC = 15.0
CLICK_RANGE_WIDTH_SEC = 10.0
NUDGE_STEP_SEC = 0.5


@dataclass(frozen=True)
class RangeState:
    start: TimeCode = ZERO
    end: TimeCode = ZERO
    loop_active: bool = False

    def set_start(self, tc: TimeCode) -> "RangeState":
        return replace(self, start=tc)

    def set_end(self, tc: TimeCode) -> "RangeState":
        return replace(self, end=tc)

    def with_loop(self, active: bool) -> "RangeState":
        return replace(self, loop_active=bool(active))

    def normalize(self) -> tuple["RangeState", bool]:
        """Push ``end`` past ``start`` when an edit left the range empty or inverted.

        Returns the corrected state and whether ``end`` changed, so callers know
        to refresh the end field.
        """
        if self.end > self.start:
            return self, False
        return replace(self, end=add_seconds(self.start, DEFAULT_RANGE_WIDTH_SEC)), True

    def nudge(self, which: str, delta_seconds: float) -> tuple["RangeState", bool]:
        if which == BOUND_START:
            nudged = self.set_start(add_seconds(self.start, delta_seconds))
        elif which == BOUND_END:
            nudged = self.set_end(add_seconds(self.end, delta_seconds))
        else:
            raise ValueError(f"Unknown range bound: {which!r}")
        return nudged.normalize()

    @property
    def duration(self) -> TimeCode:
        return self.end - self.start


def from_progress_click(ratio: float, duration: TimeCode, loop_active: bool = False) -> RangeState:
    ratio = max(0.0, min(1.0, float(ratio)))
    start = TimeCode.from_ms(int(round(duration.ms * ratio)))
    return RangeState(start=start, end=add_seconds(start, CLICK_RANGE_WIDTH_SEC), loop_active=loop_active)
