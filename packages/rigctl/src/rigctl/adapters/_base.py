from __future__ import annotations

from dataclasses import dataclass

from ..core.context import RunContext
from ..core.logging import log_event
from ..core.process import CommandResult, render_command, run_command


@dataclass(frozen=True)
class CliAdapter:
    bin_name: str
    timeout_seconds: int = 0

    def command(self, *args: str) -> list[str]:
        return [self.bin_name, *[str(a) for a in args]]

    def run(self, ctx: RunContext, *args: str, input_text: str | None = None) -> CommandResult:
        cmd = self.command(*args)
        if ctx.dry_run:
            log_event(ctx, "info", "process", "dry-run", command=render_command(cmd))
            return CommandResult(0, self.dry_run_stdout(*args), "", 0)
        return run_command(cmd, ctx.cwd, timeout_seconds=self.timeout_seconds, input_text=input_text, ctx=ctx)

    def dry_run_stdout(self, *args: str) -> str:
        return ""
