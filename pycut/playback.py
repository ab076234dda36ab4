from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from pycut.range_state import RangeState
from pycut.timecode import ZERO, TimeCode, format_timecode

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 100
# QMediaPlayer positions are qint64.
MAX_POSITION_MS = 2**63 - 1
IDLE_TIME_TEXT = f"{format_timecode(ZERO)} / {format_timecode(ZERO)}"


@dataclass(frozen=True)
class TickResult:
    ratio: float
    time_text: str
    seek_to: Optional[TimeCode] = None


def poll_tick(position: TimeCode, duration: Optional[TimeCode], range_state: RangeState) -> Optional[TickResult]:
    """Compute one poll step from the player's position and duration.

    Returns ``None`` while the media has no known positive duration; nothing is
    displayed or sought in that case.
    """
    if duration is None or duration.ms <= 0:
        return None
    ratio = position.ms / float(max(1, duration.ms))
    ratio = max(0.0, min(1.0, ratio))
    time_text = f"{format_timecode(position)} / {format_timecode(duration)}"
    seek_to = None
    if range_state.loop_active and position >= range_state.end:
        seek_to = range_state.start
    return TickResult(ratio=ratio, time_text=time_text, seek_to=seek_to)


def clamp_seek_ms(target: TimeCode, duration: Optional[TimeCode]) -> int:
    """Largest position the backend accepts for ``target``: the known duration, else qint64 max."""
    limit = MAX_POSITION_MS if duration is None else min(duration.ms, MAX_POSITION_MS)
    return max(0, min(int(target.ms), limit))


class PlaybackPoller(QObject):
    progressChanged = pyqtSignal(float)
    timeTextChanged = pyqtSignal(str)

    def __init__(self, player, range_provider: Callable[[], RangeState], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._player = player
        self._range_provider = range_provider
        self._timer = QTimer(self)
        self._timer.setInterval(POLL_INTERVAL_MS)
        self._timer.timeout.connect(self.tick)

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        if not self._timer.isActive():
            self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        self.progressChanged.emit(0.0)
        self.timeTextChanged.emit(IDLE_TIME_TEXT)

    def tick(self) -> None:
        result = poll_tick(
            self._player.current_position(),
            self._player.known_duration(),
            self._range_provider(),
        )
        if result is None:
            return
        self.progressChanged.emit(result.ratio)
        self.timeTextChanged.emit(result.time_text)
        if result.seek_to is not None:
            logger.debug("Range loop: seeking back to %s", format_timecode(result.seek_to))
            self._player.seek(result.seek_to)
