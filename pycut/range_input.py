from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from pycut.errors import TimeCodeParseError
from pycut.range_state import BOUND_END, BOUND_START, RangeState, from_progress_click
from pycut.timecode import TimeCode, add_seconds, format_timecode, parse_timecode


@dataclass
class Session:
    source_path: Optional[str] = None
    range: RangeState = field(default_factory=RangeState)
    playing: bool = False

    @property
    def has_source(self) -> bool:
        return bool(self.source_path)


@dataclass(frozen=True)
class RangeUpdate:
    """Effects the window applies after a range edit.

    ``field_writes`` maps a bound name to the text its field should show. Those
    writes are programmatic and never feed back into the edit handlers.
    """

    range: RangeState
    field_writes: Dict[str, str] = field(default_factory=dict)
    seek_to: Optional[TimeCode] = None
    start_loop: bool = False
    status: str = ""


def looping_status(range_state: RangeState) -> str:
    return f"Looping range {format_timecode(range_state.start)} - {format_timecode(range_state.end)}"


class RangeInputController:
    """Turns user-initiated range edits into range updates and player effects.

    Every public method corresponds to a user action. Writes the controller
    asks for (normalized end, nudged value, clicked range) are returned as
    ``field_writes``; the window applies them with ``setText`` while listening
    only to ``textEdited``, so programmatic writes are never re-handled.
    """

    def __init__(self, session: Optional[Session] = None) -> None:
        self.session = session if session is not None else Session()

    @property
    def range(self) -> RangeState:
        return self.session.range

    def on_text_edited(self, start_text: str, end_text: str) -> Optional[RangeUpdate]:
        try:
            start = parse_timecode(start_text)
            end = parse_timecode(end_text)
        except TimeCodeParseError:
            return None
        return self._apply(RangeState(start=start, end=end, loop_active=self.range.loop_active), {})

    def on_nudge(self, which: str, delta_seconds: float, start_text: str, end_text: str) -> Optional[RangeUpdate]:
        field_text = start_text if which == BOUND_START else end_text
        try:
            value = parse_timecode(field_text)
        except TimeCodeParseError:
            return None
        nudged_text = format_timecode(add_seconds(value, delta_seconds))
        try:
            edited = RangeState(
                start=value if which == BOUND_START else parse_timecode(start_text),
                end=value if which == BOUND_END else parse_timecode(end_text),
                loop_active=self.range.loop_active,
            )
        except TimeCodeParseError:
            # The nudged field still shows its new value; the range waits for a valid edit.
            return RangeUpdate(range=self.range, field_writes={which: nudged_text})
        nudged, end_changed = edited.nudge(which, delta_seconds)
        writes = {which: nudged_text}
        if end_changed:
            writes[BOUND_END] = format_timecode(nudged.end)
        return self._commit(nudged, writes)

    def on_play_range(self, start_text: str, end_text: str) -> Optional[RangeUpdate]:
        if not self.session.has_source:
            return None
        return self.on_text_edited(start_text, end_text)

    def on_progress_click(self, x: float, width: float, duration: Optional[TimeCode]) -> Optional[RangeUpdate]:
        if duration is None or width <= 0:
            return None
        clicked = from_progress_click(float(x) / float(width), duration, self.range.loop_active)
        writes = {
            BOUND_START: format_timecode(clicked.start),
            BOUND_END: format_timecode(clicked.end),
        }
        return self._commit(clicked, writes)

    def on_stop(self) -> RangeState:
        self.session.range = self.range.with_loop(False)
        self.session.playing = False
        return self.session.range

    def on_play_full(self) -> bool:
        if not self.session.has_source:
            return False
        self.session.range = self.range.with_loop(False)
        self.session.playing = True
        return True

    def on_source_loaded(self, path: str) -> None:
        self.session.source_path = path
        self.session.playing = False
        self.session.range = self.range.with_loop(False)

    def resolve_for_export(self, start_text: str, end_text: str) -> Optional[RangeUpdate]:
        """Parse and normalize the fields without touching playback."""
        try:
            start = parse_timecode(start_text)
            end = parse_timecode(end_text)
        except TimeCodeParseError:
            return None
        normalized, end_changed = RangeState(start=start, end=end, loop_active=self.range.loop_active).normalize()
        writes = {BOUND_END: format_timecode(normalized.end)} if end_changed else {}
        self.session.range = normalized
        return RangeUpdate(range=normalized, field_writes=writes)

    def _apply(self, edited: RangeState, writes: Dict[str, str]) -> RangeUpdate:
        normalized, end_changed = edited.normalize()
        writes = dict(writes)
        if end_changed:
            writes[BOUND_END] = format_timecode(normalized.end)
        return self._commit(normalized, writes)

    def _commit(self, new_range: RangeState, writes: Dict[str, str]) -> RangeUpdate:
        if not self.session.has_source:
            self.session.range = new_range
            return RangeUpdate(range=new_range, field_writes=writes)
        looping = new_range.with_loop(True)
        self.session.range = looping
        self.session.playing = True
        return RangeUpdate(
            range=looping,
            field_writes=writes,
            seek_to=looping.start,
            start_loop=True,
            status=looping_status(looping),
        )
