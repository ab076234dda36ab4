from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from pycut.export import ExportOutcome
from pycut.settings_store import get_settings_dir
from pycut.timecode import format_timecode

LOG_FILE_NAME = "pyCutLog.txt"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=_LOG_FORMAT)


def log_file_path() -> Path:
    return get_settings_dir() / LOG_FILE_NAME


def format_log_line(outcome: ExportOutcome, stamp: datetime) -> str:
    job = outcome.job
    result = "ok" if outcome.ok else ("code %d" % outcome.exit_code if outcome.exit_code is not None else "error")
    return "\t".join(
        [
            stamp.strftime("%Y-%m-%d %H:%M:%S"),
            result,
            job.source_path,
            f"{format_timecode(job.start)}-{format_timecode(job.end)}",
            job.dest_path,
        ]
    ) + "\n"


def append_export_log(outcome: ExportOutcome, enabled: bool = True) -> None:
    if not enabled:
        return
    line = format_log_line(outcome, datetime.now())
    try:
        with open(log_file_path(), "a", encoding="utf-8") as fh:
            fh.write(line)
    except OSError:
        pass
