from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional

from PyQt5.QtCore import QLockFile
from PyQt5.QtGui import QColor, QPalette
from PyQt5.QtWidgets import QApplication, QMessageBox

from pycut.export_log import configure_logging
from pycut.settings_store import get_settings_path
from pycut.ui.main_window import MainWindow

logger = logging.getLogger(__name__)

_INSTANCE_LOCK: Optional[QLockFile] = None


def _force_light_qt_theme(app: QApplication) -> None:
    app.setStyle("Fusion")
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(240, 240, 240))
    palette.setColor(QPalette.WindowText, QColor(0, 0, 0))
    palette.setColor(QPalette.Base, QColor(255, 255, 255))
    palette.setColor(QPalette.AlternateBase, QColor(245, 245, 245))
    palette.setColor(QPalette.Text, QColor(0, 0, 0))
    palette.setColor(QPalette.Button, QColor(240, 240, 240))
    palette.setColor(QPalette.ButtonText, QColor(0, 0, 0))
    palette.setColor(QPalette.Highlight, QColor(0, 120, 215))
    palette.setColor(QPalette.HighlightedText, QColor(255, 255, 255))
    app.setPalette(palette)


def _parse_startup_args(argv: list[str]) -> tuple[list[str], bool, bool, Optional[str]]:
    clean_tokens = {"--cleanstart", "/cleanstart"}
    debug_tokens = {"-debug", "--debug", "/debug"}
    cleanstart = False
    debug = False
    video_path: Optional[str] = None
    filtered = [argv[0]] if argv else [""]
    for arg in argv[1:]:
        token = str(arg or "").strip().lower()
        if token in clean_tokens:
            cleanstart = True
            continue
        if token in debug_tokens:
            debug = True
            continue
        if video_path is None and not token.startswith("-") and os.path.isfile(arg):
            video_path = arg
            continue
        filtered.append(arg)
    return filtered, cleanstart, debug, video_path


def _confirm_cleanstart_warning() -> bool:
    answer = QMessageBox.warning(
        None,
        "Cleanstart Warning",
        "Cleanstart will reset all settings to defaults. Continue?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return answer == QMessageBox.Yes


def _apply_cleanstart() -> bool:
    settings_path = get_settings_path()
    if not settings_path.exists():
        return True
    try:
        os.remove(settings_path)
        return True
    except OSError as exc:
        QMessageBox.critical(None, "Cleanstart Failed", f"Could not remove settings.ini for cleanstart.\n\n{exc}")
        return False


def _acquire_single_instance_lock() -> bool:
    global _INSTANCE_LOCK
    lock_path = str(Path(tempfile.gettempdir()) / "pycut.instance.lock")
    lock = QLockFile(lock_path)
    lock.setStaleLockTime(30_000)
    if lock.tryLock(0):
        _INSTANCE_LOCK = lock
        return True
    QMessageBox.critical(
        None,
        "pyCut Already Running",
        "Another instance of pyCut is already running.\n\nClose the existing instance, then launch pyCut again.",
    )
    return False


def main() -> int:
    qt_argv, cleanstart_requested, debug_requested, video_path = _parse_startup_args(list(sys.argv))
    configure_logging(debug_requested)
    app = QApplication(qt_argv)
    _force_light_qt_theme(app)
    if cleanstart_requested:
        if not _confirm_cleanstart_warning():
            return 0
        if not _apply_cleanstart():
            return 1
    if not _acquire_single_instance_lock():
        return 1
    win = MainWindow()
    win.show()
    if video_path:
        logger.info("Opening %s from command line", video_path)
        win.open_video(video_path)
    return app.exec_()


if __name__ == "__main__":
    raise SystemExit(main())
