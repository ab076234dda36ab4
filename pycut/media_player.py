from __future__ import annotations

import logging
import os
from typing import Optional

from PyQt5.QtCore import QObject, QUrl, pyqtSignal
from PyQt5.QtMultimedia import QMediaContent, QMediaPlayer

from pycut.playback import clamp_seek_ms
from pycut.timecode import TimeCode

logger = logging.getLogger(__name__)


class VideoPlayer(QObject):
    """Narrow playback surface over ``QMediaPlayer``.

    Only what the range controller and poller need is exposed: load, play,
    stop, seek, position and the duration once the backend knows it.
    """

    errorOccurred = pyqtSignal(str)
    durationChanged = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._player = QMediaPlayer(self, QMediaPlayer.VideoSurface)
        self._player.error.connect(self._on_error)
        self._player.durationChanged.connect(self._on_duration_changed)
        self._source_path = ""

    @property
    def source_path(self) -> str:
        return self._source_path

    def set_video_output(self, widget) -> None:
        self._player.setVideoOutput(widget)

    def set_volume(self, volume: int) -> None:
        self._player.setVolume(max(0, min(100, int(volume))))

    def has_source(self) -> bool:
        return bool(self._source_path)

    def load_source(self, path: str) -> None:
        self._player.stop()
        self._source_path = os.path.abspath(path)
        self._player.setMedia(QMediaContent(QUrl.fromLocalFile(self._source_path)))
        logger.info("Loaded media %s", self._source_path)

    def play(self) -> None:
        if not self._source_path:
            return
        self._player.play()

    def stop(self) -> None:
        self._player.stop()

    def seek(self, tc: TimeCode) -> None:
        self._player.setPosition(clamp_seek_ms(tc, self.known_duration()))

    def current_position(self) -> TimeCode:
        return TimeCode.from_ms(self._player.position())

    def known_duration(self) -> Optional[TimeCode]:
        duration = int(self._player.duration())
        if duration <= 0:
            return None
        return TimeCode(duration)

    def is_playing(self) -> bool:
        return self._player.state() == QMediaPlayer.PlayingState

    def _on_duration_changed(self, _duration_ms: int) -> None:
        self.durationChanged.emit(self.known_duration())

    def _on_error(self, _error: int) -> None:
        message = self._player.errorString() or "Unknown media error"
        logger.warning("Media error for %s: %s", self._source_path, message)
        self.errorOccurred.emit(message)
