from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import QSize, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QPainter, QPen
from PyQt5.QtWidgets import QWidget


class RangeProgressBar(QWidget):
    """Playback progress strip that also shows the selected range.

    A left click reports the click x position together with the rendered width;
    mapping that to a range is left to the controller.
    """

    clicked = pyqtSignal(float, float)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._ratio = 0.0
        self._duration_ms = 0
        self._start_ms: Optional[int] = None
        self._end_ms: Optional[int] = None
        self.setMinimumHeight(22)
        self.setCursor(Qt.PointingHandCursor)

    def sizeHint(self) -> QSize:
        return QSize(480, 24)

    def value(self) -> float:
        return self._ratio

    def set_ratio(self, ratio: float) -> None:
        self._ratio = max(0.0, min(1.0, float(ratio)))
        self.update()

    def set_range(self, duration_ms: int, start_ms: Optional[int], end_ms: Optional[int]) -> None:
        self._duration_ms = max(0, int(duration_ms))
        self._start_ms = None if start_ms is None else max(0, int(start_ms))
        self._end_ms = None if end_ms is None else max(0, int(end_ms))
        self.update()

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.clicked.emit(float(event.pos().x()), float(self.width()))
            event.accept()
            return
        super().mousePressEvent(event)

    def _x_for_ms(self, value_ms: int, width: int) -> int:
        if self._duration_ms <= 0 or width <= 1:
            return 0
        ratio = max(0.0, min(1.0, value_ms / float(self._duration_ms)))
        return int(round(ratio * (width - 1)))

    def paintEvent(self, _event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, False)
        w = max(1, self.width())
        h = max(1, self.height())

        painter.fillRect(0, 0, w, h, QColor("#E6E6E6"))
        filled = int(round(self._ratio * w))
        if filled > 0:
            painter.fillRect(0, 0, filled, h, QColor("#06B025"))

        if self._duration_ms > 0 and self._start_ms is not None and self._end_ms is not None:
            x1 = self._x_for_ms(self._start_ms, w)
            x2 = self._x_for_ms(self._end_ms, w)
            # End may run past the media; it is pinned to the right edge.
            painter.fillRect(x1, 0, max(1, x2 - x1 + 1), 4, QColor("#0078D7"))
            in_pen = QPen(QColor("#00C853"))
            in_pen.setWidth(2)
            painter.setPen(in_pen)
            painter.drawLine(x1, 0, x1, h - 1)
            out_pen = QPen(QColor("#FF5252"))
            out_pen.setWidth(2)
            painter.setPen(out_pen)
            painter.drawLine(x2, 0, x2, h - 1)

        painter.setPen(QColor("#BCBCBC"))
        painter.drawRect(0, 0, w - 1, h - 1)
        painter.end()
