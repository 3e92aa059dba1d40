from __future__ import annotations

import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .logging import log_event

if TYPE_CHECKING:
    from .context import RunContext

TIMEOUT_EXIT_CODE = 124


@dataclass(frozen=True)
class CommandResult:
    code: int
    stdout: str
    stderr: str
    duration_ms: int

    @property
    def ok(self) -> bool:
        return self.code == 0

    @property
    def combined_output(self) -> str:
        return (self.stdout + self.stderr).strip()


def render_command(cmd: list[str]) -> str:
    return " ".join(shlex.quote(part) for part in cmd)


def run_command(
    cmd: list[str],
    cwd: Path,
    timeout_seconds: int = 0,
    input_text: str | None = None,
    ctx: RunContext | None = None,
) -> CommandResult:
    started = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            input=input_text,
            text=True,
            capture_output=True,
            check=False,
            timeout=(timeout_seconds if timeout_seconds > 0 else None),
        )
        result = CommandResult(
            code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            duration_ms=int((time.monotonic() - started) * 1000),
        )
    except subprocess.TimeoutExpired as exc:
        result = CommandResult(
            code=TIMEOUT_EXIT_CODE,
            stdout=_as_text(exc.stdout),
            stderr=(_as_text(exc.stderr) + f"\ncommand timed out after {timeout_seconds}s").strip(),
            duration_ms=int((time.monotonic() - started) * 1000),
        )
    except FileNotFoundError as exc:
        result = CommandResult(
            code=127,
            stdout="",
            stderr=f"executable not found: {exc.filename or cmd[0]}",
            duration_ms=int((time.monotonic() - started) * 1000),
        )
    if ctx is not None:
        log_event(
            ctx,
            "info",
            "process",
            "run-command",
            command=render_command(cmd),
            code=result.code,
            duration_ms=result.duration_ms,
        )
    return result


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
