from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from pycut.errors import TimeCodeParseError

_TIMECODE_RE = re.compile(r"^(\d{2,}):([0-5]\d):([0-5]\d)\.(\d{3})$", re.ASCII)


@dataclass(frozen=True, order=True)
class TimeCode:
    """Non-negative duration with millisecond resolution."""

    ms: int = 0

    def __post_init__(self) -> None:
        if self.ms < 0:
            object.__setattr__(self, "ms", 0)

    @classmethod
    def from_ms(cls, ms: int) -> "TimeCode":
        return cls(max(0, int(ms)))

    @classmethod
    def from_seconds(cls, seconds: float) -> "TimeCode":
        return cls(max(0, int(round(float(seconds) * 1000.0))))

    @property
    def seconds(self) -> float:
        return self.ms / 1000.0

    def __add__(self, other: "TimeCode") -> "TimeCode":
        return TimeCode(self.ms + other.ms)

    def __sub__(self, other: "TimeCode") -> "TimeCode":
        return TimeCode(max(0, self.ms - other.ms))

    def __str__(self) -> str:
        return format_timecode(self)


ZERO = TimeCode(0)


def _split_fields(tc: TimeCode) -> tuple[int, int, int, int]:
    total_seconds, millis = divmod(max(0, int(tc.ms)), 1000)
    total_minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(total_minutes, 60)
    return hours, minutes, seconds, millis


def parse_timecode(text: str) -> TimeCode:
    value = str(text or "").strip()
    if "." not in value:
        value += ".000"
    match = _TIMECODE_RE.match(value)
    if match is None:
        raise TimeCodeParseError(text)
    hours, minutes, seconds, millis = (int(part) for part in match.groups())
    return TimeCode((((hours * 60) + minutes) * 60 + seconds) * 1000 + millis)


def try_parse_timecode(text: str) -> Optional[TimeCode]:
    try:
        return parse_timecode(text)
    except TimeCodeParseError:
        return None


def format_timecode(tc: TimeCode) -> str:
    hours, minutes, seconds, millis = _split_fields(tc)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def format_filename_safe(tc: TimeCode) -> str:
    hours, minutes, seconds, millis = _split_fields(tc)
    return f"{hours:02d}-{minutes:02d}-{seconds:02d}-{millis:03d}"


def add_seconds(tc: TimeCode, delta_seconds: float) -> TimeCode:
    # Floors at zero when subtracting past the start of the media.
    delta_ms = int(round(float(delta_seconds) * 1000.0))
    return TimeCode(max(0, tc.ms + delta_ms))
