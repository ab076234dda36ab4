from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from PyQt5.QtCore import QUrl, Qt
from PyQt5.QtGui import QDesktopServices
from PyQt5.QtMultimediaWidgets import QVideoWidget
from PyQt5.QtWidgets import (
    QAction,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from pycut.export import (
    VIDEO_OPEN_FILTER,
    VIDEO_SAVE_FILTER,
    CommandRunner,
    ExportInvoker,
    ExportJob,
    ExportOutcome,
    ExportWorker,
    run_command,
    suggested_filename,
)
from pycut.export_log import append_export_log, log_file_path
from pycut.media_player import VideoPlayer
from pycut.playback import IDLE_TIME_TEXT, PlaybackPoller
from pycut.range_input import RangeInputController, RangeUpdate, Session
from pycut.range_state import BOUND_END, BOUND_START, NUDGE_STEP_SEC
from pycut.settings_store import AppSettings, load_settings, save_settings
from pycut.timecode import ZERO, format_timecode
from pycut.ui.range_progress import RangeProgressBar
from pycut.version import get_app_title_base

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(
        self,
        player=None,
        settings: Optional[AppSettings] = None,
        runner: CommandRunner = run_command,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings if settings is not None else load_settings()
        self.setWindowTitle(get_app_title_base())
        self.resize(self.settings.window_width, self.settings.window_height)

        self.player = player if player is not None else VideoPlayer(self)
        self.session = Session()
        self.controller = RangeInputController(self.session)
        self.export_invoker = ExportInvoker()
        self._runner = runner
        self._export_worker: Optional[ExportWorker] = None

        self.poller = PlaybackPoller(self.player, lambda: self.session.range, self)

        self._build_ui()
        self._build_menu_bar()
        self.player.set_video_output(self.video_widget)
        self.player.set_volume(self.settings.volume)
        error_signal = getattr(self.player, "errorOccurred", None)
        if error_signal is not None:
            error_signal.connect(self._on_player_error)
        duration_signal = getattr(self.player, "durationChanged", None)
        if duration_signal is not None:
            duration_signal.connect(self._on_duration_changed)

        self.poller.progressChanged.connect(self.progress.set_ratio)
        self.poller.timeTextChanged.connect(self.time_label.setText)

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        root_layout = QVBoxLayout(root)
        root_layout.setContentsMargins(8, 8, 8, 8)
        root_layout.setSpacing(6)

        file_row = QHBoxLayout()
        self.open_btn = QPushButton("Open...")
        self.file_edit = QLineEdit("")
        self.file_edit.setReadOnly(True)
        file_row.addWidget(self.open_btn)
        file_row.addWidget(self.file_edit, 1)
        root_layout.addLayout(file_row)

        self.video_widget = QVideoWidget()
        self.video_widget.setMinimumSize(320, 180)
        self.video_widget.setStyleSheet("background:#000;")
        root_layout.addWidget(self.video_widget, 1)

        self.progress = RangeProgressBar()
        root_layout.addWidget(self.progress)

        transport = QHBoxLayout()
        self.play_btn = QPushButton("Play")
        self.stop_btn = QPushButton("Stop")
        self.play_range_btn = QPushButton("Play Range")
        transport.addWidget(self.play_btn)
        transport.addWidget(self.stop_btn)
        transport.addWidget(self.play_range_btn)
        transport.addStretch(1)
        self.time_label = QLabel(IDLE_TIME_TEXT)
        transport.addWidget(self.time_label)
        transport.addSpacing(12)
        transport.addWidget(QLabel("Volume"))
        self.volume_slider = QSlider(Qt.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setValue(self.settings.volume)
        self.volume_slider.setFixedWidth(110)
        transport.addWidget(self.volume_slider)
        root_layout.addLayout(transport)

        range_row = QHBoxLayout()
        self.start_edit = QLineEdit(format_timecode(ZERO))
        self.end_edit = QLineEdit(format_timecode(ZERO))
        self.start_edit.setPlaceholderText("HH:MM:SS.mmm")
        self.end_edit.setPlaceholderText("HH:MM:SS.mmm")
        self.start_minus_btn = QPushButton("-")
        self.start_plus_btn = QPushButton("+")
        self.end_minus_btn = QPushButton("-")
        self.end_plus_btn = QPushButton("+")
        for btn in (self.start_minus_btn, self.start_plus_btn, self.end_minus_btn, self.end_plus_btn):
            btn.setFixedWidth(28)
        range_row.addWidget(QLabel("Start"))
        range_row.addWidget(self.start_minus_btn)
        range_row.addWidget(self.start_edit)
        range_row.addWidget(self.start_plus_btn)
        range_row.addSpacing(16)
        range_row.addWidget(QLabel("End"))
        range_row.addWidget(self.end_minus_btn)
        range_row.addWidget(self.end_edit)
        range_row.addWidget(self.end_plus_btn)
        range_row.addStretch(1)
        self.cut_btn = QPushButton("Cut")
        self.cut_btn.setStyleSheet("font-weight: bold;")
        range_row.addWidget(self.cut_btn)
        root_layout.addLayout(range_row)

        self.status_label = QLabel("Ready")
        self.status_label.setStyleSheet("color:#333;")
        root_layout.addWidget(self.status_label)

        self._field_edits: Dict[str, QLineEdit] = {BOUND_START: self.start_edit, BOUND_END: self.end_edit}

        self.open_btn.clicked.connect(self._open_video_dialog)
        self.play_btn.clicked.connect(self._play)
        self.stop_btn.clicked.connect(self._stop)
        self.play_range_btn.clicked.connect(self._play_range)
        self.cut_btn.clicked.connect(self._cut)
        self.volume_slider.valueChanged.connect(self._on_volume_changed)
        self.progress.clicked.connect(self._on_progress_clicked)
        # textEdited fires for user typing only; setText from the controller stays silent.
        self.start_edit.textEdited.connect(self._on_range_text_edited)
        self.end_edit.textEdited.connect(self._on_range_text_edited)
        self.start_minus_btn.clicked.connect(lambda: self._nudge(BOUND_START, -NUDGE_STEP_SEC))
        self.start_plus_btn.clicked.connect(lambda: self._nudge(BOUND_START, NUDGE_STEP_SEC))
        self.end_minus_btn.clicked.connect(lambda: self._nudge(BOUND_END, -NUDGE_STEP_SEC))
        self.end_plus_btn.clicked.connect(lambda: self._nudge(BOUND_END, NUDGE_STEP_SEC))

    def _build_menu_bar(self) -> None:
        file_menu = self.menuBar().addMenu("File")
        open_action = QAction("Open Video", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self._open_video_dialog)
        file_menu.addAction(open_action)
        file_menu.addSeparator()
        exit_action = QAction("Exit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        log_menu = self.menuBar().addMenu("Logs")
        self.log_enabled_action = QAction("Enable Cut Log", self)
        self.log_enabled_action.setCheckable(True)
        self.log_enabled_action.setChecked(self.settings.log_file_enabled)
        self.log_enabled_action.toggled.connect(self._on_log_enabled_toggled)
        log_menu.addAction(self.log_enabled_action)
        view_log_action = QAction("View Log", self)
        view_log_action.triggered.connect(self._view_log_file)
        log_menu.addAction(view_log_action)

    def closeEvent(self, event) -> None:
        if self._export_worker is not None and self._export_worker.isRunning():
            # The worker thread is a child of the window and must outlive it.
            self._set_status("Cutting... close when finished")
            event.ignore()
            return
        self.poller.stop()
        self.player.stop()
        self.settings.window_width = self.width()
        self.settings.window_height = self.height()
        self._save_settings()
        super().closeEvent(event)

    def _save_settings(self) -> None:
        try:
            save_settings(self.settings)
        except OSError as exc:
            logger.warning("Could not save settings: %s", exc)

    def _set_status(self, text: str) -> None:
        self.status_label.setText(text)
        logger.debug("Status: %s", text)

    def _open_video_dialog(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open Video", self.settings.last_open_dir, VIDEO_OPEN_FILTER)
        if not path:
            return
        self.settings.last_open_dir = os.path.dirname(path)
        self.open_video(path)
        self._save_settings()

    def open_video(self, path: str) -> None:
        self.poller.stop()
        self.player.load_source(path)
        self.controller.on_source_loaded(path)
        self.settings.last_video_path = path
        self.file_edit.setText(path)
        self._refresh_range_indicator()
        self._set_status("Loaded: " + os.path.basename(path))

    def _play(self) -> None:
        if not self.controller.on_play_full():
            return
        self.player.play()
        self.poller.start()
        self._set_status("Playing full video")

    def _stop(self) -> None:
        self.player.stop()
        self.poller.stop()
        self.controller.on_stop()
        self._set_status("Stopped")

    def _play_range(self) -> None:
        self._apply_range_update(self.controller.on_play_range(self.start_edit.text(), self.end_edit.text()))

    def _on_range_text_edited(self, _text: str = "") -> None:
        self._apply_range_update(self.controller.on_text_edited(self.start_edit.text(), self.end_edit.text()))

    def _nudge(self, which: str, delta_seconds: float) -> None:
        update = self.controller.on_nudge(which, delta_seconds, self.start_edit.text(), self.end_edit.text())
        self._apply_range_update(update)

    def _on_progress_clicked(self, x: float, width: float) -> None:
        update = self.controller.on_progress_click(x, width, self.player.known_duration())
        self._apply_range_update(update)

    def _apply_range_update(self, update: Optional[RangeUpdate]) -> None:
        if update is None:
            return
        for which, text in update.field_writes.items():
            self._field_edits[which].setText(text)
        self._refresh_range_indicator()
        if update.seek_to is not None:
            self.player.seek(update.seek_to)
        if update.start_loop:
            self.player.play()
            self.poller.start()
        if update.status:
            self._set_status(update.status)

    def _on_duration_changed(self, _duration) -> None:
        self._refresh_range_indicator()

    def _refresh_range_indicator(self) -> None:
        duration = self.player.known_duration()
        current = self.session.range
        self.progress.set_range(0 if duration is None else duration.ms, current.start.ms, current.end.ms)

    def _cut(self) -> None:
        if not self.session.has_source or self.export_invoker.busy:
            return
        update = self.controller.resolve_for_export(self.start_edit.text(), self.end_edit.text())
        if update is None:
            return
        for which, text in update.field_writes.items():
            self._field_edits[which].setText(text)
        self._refresh_range_indicator()

        source = self.session.source_path or ""
        suggested = suggested_filename(source, update.range.start, update.range.end)
        save_dir = self.settings.last_save_dir or os.path.dirname(source)
        dest, _ = QFileDialog.getSaveFileName(self, "Save Cut", os.path.join(save_dir, suggested), VIDEO_SAVE_FILTER)
        if not dest:
            return
        self.settings.last_save_dir = os.path.dirname(dest)
        self._save_settings()
        self.start_export(ExportJob(source_path=source, start=update.range.start, end=update.range.end, dest_path=dest))

    def start_export(self, job: ExportJob) -> bool:
        if not self.export_invoker.begin(job):
            return False
        self.cut_btn.setEnabled(False)
        self._set_status("Cutting...")
        worker = ExportWorker(job, self.settings.encoder_path, self._runner, self)
        worker.exportFinished.connect(self._on_export_finished)
        worker.finished.connect(worker.deleteLater)
        self._export_worker = worker
        worker.start()
        return True

    def _on_export_finished(self, outcome: ExportOutcome) -> None:
        self._export_worker = None
        self.export_invoker.finish()
        self.cut_btn.setEnabled(True)
        self._set_status(outcome.message)
        append_export_log(outcome, self.settings.log_file_enabled)

    def _on_player_error(self, message: str) -> None:
        self._set_status("Error: " + message)

    def _on_volume_changed(self, value: int) -> None:
        self.settings.volume = int(value)
        self.player.set_volume(value)

    def _on_log_enabled_toggled(self, checked: bool) -> None:
        self.settings.log_file_enabled = bool(checked)
        self._save_settings()

    def _view_log_file(self) -> None:
        path = log_file_path()
        if not path.exists():
            QMessageBox.information(self, "View Log", f"No log file yet.\n{path}")
            return
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(str(path))):
            QMessageBox.warning(self, "View Log", f"Could not open log file:\n{path}")
