from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from .env import getenv

OutputFormat = Literal["text", "json"]


def default_run_id(now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d-%H%M%S")
    return f"rigctl-{stamp}"


@dataclass(frozen=True)
class RunContext:
    run_id: str
    cwd: Path
    evidence_root: Path
    run_dir: Path
    output_format: OutputFormat
    verbose: bool
    quiet: bool
    log_json: bool
    dry_run: bool

    def resolve(self, path: str | Path) -> Path:
        candidate = Path(path).expanduser()
        return candidate if candidate.is_absolute() else (self.cwd / candidate)

    def with_dry_run(self, dry_run: bool) -> "RunContext":
        return RunContext(
            run_id=self.run_id,
            cwd=self.cwd,
            evidence_root=self.evidence_root,
            run_dir=self.run_dir,
            output_format=self.output_format,
            verbose=self.verbose,
            quiet=self.quiet,
            log_json=self.log_json,
            dry_run=dry_run,
        )

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        evidence_root: str | None,
        cwd: str | None = None,
        output_format: OutputFormat = "text",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
        dry_run: bool = False,
    ) -> "RunContext":
        work_dir = Path(cwd).expanduser().resolve() if cwd else Path.cwd().resolve()
        resolved_run_id = run_id or getenv("RUN_ID") or default_run_id()
        root = Path(evidence_root or getenv("EVIDENCE_ROOT", "artifacts/evidence")).expanduser()
        evidence_root_path = root.resolve() if root.is_absolute() else (work_dir / root).resolve()
        return cls(
            run_id=resolved_run_id,
            cwd=work_dir,
            evidence_root=evidence_root_path,
            run_dir=evidence_root_path / resolved_run_id,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
            dry_run=dry_run,
        )
