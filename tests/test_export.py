import subprocess
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from pycut import export
from pycut.errors import EncoderLaunchError
from pycut.export import (
    CommandResult,
    ExportInvoker,
    ExportJob,
    ExportWorker,
    build_encoder_args,
    execute_export,
    run_command,
    suggested_filename,
)
from pycut.timecode import TimeCode


def _job(dest="/out/match_cut.mp4"):
    return ExportJob(
        source_path="/videos/match day.mkv",
        start=TimeCode(10000),
        end=TimeCode(25000),
        dest_path=dest,
    )


def test_suggested_filename_uses_stem_and_file_safe_times():
    name = suggested_filename("/videos/match day.mkv", TimeCode(10000), TimeCode(3725500))
    assert name == "match day_00-00-10-000_01-02-05-500.mp4"


def test_encoder_args_stream_copy_range():
    args = build_encoder_args(_job(), "ffmpeg")
    assert args == [
        "ffmpeg",
        "-ss",
        "00:00:10.000",
        "-i",
        "/videos/match day.mkv",
        "-t",
        "00:00:15.000",
        "-c",
        "copy",
        "/out/match_cut.mp4",
        "-y",
    ]


def test_successful_export_reports_destination():
    calls = []

    def runner(args):
        calls.append(list(args))
        return CommandResult(exit_code=0, stderr_text="frame=1")

    outcome = execute_export(_job(), runner)
    assert outcome.ok is True
    assert outcome.exit_code == 0
    assert outcome.message == "Cut saved: /out/match_cut.mp4"
    assert calls[0][0] == "ffmpeg"


def test_non_zero_exit_reports_code():
    outcome = execute_export(_job(), lambda args: CommandResult(exit_code=1, stderr_text="Invalid data"))
    assert outcome.ok is False
    assert outcome.exit_code == 1
    assert outcome.message == "ffmpeg failed (code 1)"
    assert outcome.stderr_text == "Invalid data"


def test_launch_failure_is_its_own_message():
    def runner(args):
        raise EncoderLaunchError(args[0], "No such file or directory")

    outcome = execute_export(_job(), runner, encoder="ffmpeg-missing")
    assert outcome.ok is False
    assert outcome.exit_code is None
    assert outcome.message.startswith("Error: Failed to start ffmpeg-missing")


def test_run_command_missing_binary_raises_launch_error():
    with pytest.raises(EncoderLaunchError) as excinfo:
        run_command(["pycut-no-such-encoder-binary", "-version"])
    assert excinfo.value.program == "pycut-no-such-encoder-binary"


def test_run_command_captures_stderr(monkeypatch):
    seen = {}

    def fake_run(args, **kwargs):
        seen.update(kwargs)
        return subprocess.CompletedProcess(args, 3, stdout=None, stderr="moov atom not found")

    monkeypatch.setattr(export.subprocess, "run", fake_run)
    result = run_command(["ffmpeg", "-i", "x"])
    assert result == CommandResult(exit_code=3, stderr_text="moov atom not found")
    assert seen["stderr"] == subprocess.PIPE
    assert seen["check"] is False


def test_invoker_is_single_flight():
    invoker = ExportInvoker()
    first = _job("/out/a.mp4")
    assert invoker.begin(first) is True
    assert invoker.busy is True
    assert invoker.begin(_job("/out/b.mp4")) is False
    assert invoker.current_job == first
    invoker.finish()
    assert invoker.busy is False
    assert invoker.begin(_job("/out/b.mp4")) is True


def test_worker_turns_unexpected_errors_into_outcome():
    def runner(args):
        raise RuntimeError("boom")

    worker = ExportWorker(_job(), runner=runner)
    outcomes = []
    worker.exportFinished.connect(outcomes.append)
    worker.run()
    assert len(outcomes) == 1
    assert outcomes[0].ok is False
    assert outcomes[0].message == "Error: boom"
