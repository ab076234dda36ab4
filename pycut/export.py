from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from pycut.errors import EncoderExecutionError, EncoderLaunchError, ExportError
from pycut.timecode import TimeCode, format_filename_safe, format_timecode

logger = logging.getLogger(__name__)

DEFAULT_ENCODER = "ffmpeg"
VIDEO_OPEN_FILTER = "Video files (*.mp4 *.mkv *.avi *.mov *.wmv);;All files (*.*)"
VIDEO_SAVE_FILTER = "MP4 file (*.mp4);;All files (*.*)"


@dataclass(frozen=True)
class ExportJob:
    source_path: str
    start: TimeCode
    end: TimeCode
    dest_path: str

    @property
    def duration(self) -> TimeCode:
        return self.end - self.start


@dataclass(frozen=True)
class CommandResult:
    exit_code: int
    stderr_text: str = ""


@dataclass(frozen=True)
class ExportOutcome:
    job: ExportJob
    ok: bool
    message: str
    exit_code: Optional[int] = None
    stderr_text: str = ""


CommandRunner = Callable[[List[str]], CommandResult]


def suggested_filename(source_path: str, start: TimeCode, end: TimeCode) -> str:
    stem = Path(source_path).stem
    return f"{stem}_{format_filename_safe(start)}_{format_filename_safe(end)}.mp4"


def build_encoder_args(job: ExportJob, encoder: str = DEFAULT_ENCODER) -> List[str]:
    return [
        encoder,
        "-ss",
        format_timecode(job.start),
        "-i",
        job.source_path,
        "-t",
        format_timecode(job.duration),
        "-c",
        "copy",
        job.dest_path,
        "-y",
    ]


def run_command(args: List[str]) -> CommandResult:
    """Run ``args`` to completion and return its exit code with the full stderr text.

    stderr is drained by ``subprocess.run`` before the exit status is read, so a
    chatty encoder cannot stall on a full pipe.
    """
    program = args[0] if args else ""
    try:
        completed = subprocess.run(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
            check=False,
        )
    except OSError as exc:
        raise EncoderLaunchError(program, exc.strerror or str(exc)) from exc
    return CommandResult(exit_code=int(completed.returncode), stderr_text=completed.stderr or "")


def execute_export(
    job: ExportJob,
    runner: CommandRunner = run_command,
    encoder: str = DEFAULT_ENCODER,
) -> ExportOutcome:
    args = build_encoder_args(job, encoder)
    logger.info("Running encoder: %s", " ".join(args))
    try:
        result = runner(args)
        if result.exit_code != 0:
            raise EncoderExecutionError(encoder, result.exit_code, result.stderr_text)
    except EncoderLaunchError as exc:
        logger.error("Encoder launch failed: %s", exc)
        return ExportOutcome(job=job, ok=False, message=f"Error: {exc}")
    except EncoderExecutionError as exc:
        # A partial destination file may remain; it is left on disk.
        logger.error("Encoder exited with code %d for %s", exc.exit_code, job.dest_path)
        if exc.stderr_text:
            logger.debug("Encoder stderr:\n%s", exc.stderr_text)
        return ExportOutcome(
            job=job,
            ok=False,
            message=f"{encoder} failed (code {exc.exit_code})",
            exit_code=exc.exit_code,
            stderr_text=exc.stderr_text,
        )
    logger.info("Cut saved: %s", job.dest_path)
    return ExportOutcome(
        job=job,
        ok=True,
        message=f"Cut saved: {job.dest_path}",
        exit_code=0,
        stderr_text=result.stderr_text,
    )


class ExportInvoker:
    """Single-flight gate for exports within one window session."""

    def __init__(self) -> None:
        self._current: Optional[ExportJob] = None

    @property
    def busy(self) -> bool:
        return self._current is not None

    @property
    def current_job(self) -> Optional[ExportJob]:
        return self._current

    def begin(self, job: ExportJob) -> bool:
        if self._current is not None:
            logger.info("Export already running; ignoring request for %s", job.dest_path)
            return False
        self._current = job
        return True

    def finish(self) -> None:
        self._current = None


class ExportWorker(QThread):
    """Runs one export off the UI thread; ``exportFinished`` is delivered queued."""

    exportFinished = pyqtSignal(object)

    def __init__(
        self,
        job: ExportJob,
        encoder: str = DEFAULT_ENCODER,
        runner: CommandRunner = run_command,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.job = job
        self.encoder = encoder
        self.runner = runner

    def run(self) -> None:
        try:
            outcome = execute_export(self.job, self.runner, self.encoder)
        except ExportError as exc:
            outcome = ExportOutcome(job=self.job, ok=False, message=f"Error: {exc}")
        except Exception as exc:
            logger.exception("Unexpected export failure")
            outcome = ExportOutcome(job=self.job, ok=False, message=f"Error: {exc}")
        self.exportFinished.emit(outcome)
