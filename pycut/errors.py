from __future__ import annotations

from typing import Optional


class PyCutError(Exception):
    pass


class TimeCodeParseError(PyCutError, ValueError):
    def __init__(self, text: str) -> None:
        self.text = str(text or "")
        super().__init__(f"Malformed timecode {self.text!r}. Use HH:MM:SS or HH:MM:SS.mmm.")


class ExportError(PyCutError):
    pass


class EncoderLaunchError(ExportError):
    def __init__(self, program: str, reason: str) -> None:
        self.program = program
        self.reason = reason
        super().__init__(f"Failed to start {program}: {reason}. Ensure {program} is available.")


class EncoderExecutionError(ExportError):
    def __init__(self, program: str, exit_code: int, stderr_text: Optional[str] = None) -> None:
        self.program = program
        self.exit_code = int(exit_code)
        self.stderr_text = stderr_text or ""
        super().__init__(f"{program} failed (code {self.exit_code})")
