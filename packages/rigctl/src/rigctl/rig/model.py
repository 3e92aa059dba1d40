from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from ..errors import InputError, ScriptError

Phase = Literal[
    "not_started",
    "discovering",
    "preparing",
    "initializing",
    "running",
    "collecting",
    "tearing_down",
    "done",
]
StepStatus = Literal["ok", "skipped", "failed"]
RunStatus = Literal["running", "ok", "error"]


def default_report_folder(now: datetime | None = None) -> Path:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d-%H%M%S")
    return Path(f"report-{stamp}")


def coordinator_name(identifier: str) -> str:
    """Strip the resource-kind prefix kubectl prints with ``-o name``."""
    return identifier.strip().rsplit("/", 1)[-1]


def _readable_file(path: Path, label: str) -> None:
    if not path.is_file():
        raise InputError(f"{label} not found: {path}")
    if not os.access(path, os.R_OK):
        raise InputError(f"{label} is not readable: {path}")


@dataclass(frozen=True)
class RunRequest:
    tenant: str
    test_definition: Path
    report_folder: Path | None = None
    delete_rig_after: bool = True
    config_file: Path | None = None
    seed_script: Path | None = None
    init_once_on_coordinator: bool = False
    params: tuple[str, ...] = ()

    def validate(self, cwd: Path, now: datetime | None = None) -> "RunRequest":
        """Return a copy with every local path made absolute against ``cwd``."""
        tenant = self.tenant.strip()
        if not tenant:
            raise InputError("tenant must be a non-empty namespace")

        def resolve(path: Path) -> Path:
            path = Path(path).expanduser()
            return path if path.is_absolute() else cwd / path

        test_definition = resolve(self.test_definition)
        _readable_file(test_definition, "test definition")
        config_file = resolve(self.config_file) if self.config_file is not None else None
        if config_file is not None:
            _readable_file(config_file, "user properties file")
        seed_script = resolve(self.seed_script) if self.seed_script is not None else None
        if seed_script is not None:
            _readable_file(seed_script, "redis script")
        report_folder = resolve(self.report_folder or default_report_folder(now))
        if report_folder.exists():
            if not report_folder.is_dir():
                raise InputError(f"report folder exists and is not a directory: {report_folder}")
            if any(report_folder.iterdir()):
                raise InputError(f"report folder is not empty: {report_folder}")
        return replace(
            self,
            tenant=tenant,
            test_definition=test_definition,
            report_folder=report_folder,
            config_file=config_file,
            seed_script=seed_script,
            params=tuple(self.params),
        )

    @property
    def resolved_report_folder(self) -> Path:
        if self.report_folder is None:
            raise InputError("report folder is unset; validate the request first")
        return self.report_folder


@dataclass(frozen=True)
class StepRecord:
    name: str
    status: StepStatus
    duration_ms: int = 0
    detail: str = ""

    def payload(self) -> dict[str, object]:
        return {"name": self.name, "status": self.status, "duration_ms": self.duration_ms, "detail": self.detail}


@dataclass
class RunReport:
    run_id: str
    tenant: str
    report_folder: Path
    params: tuple[str, ...]
    dry_run: bool = False
    coordinator: str | None = None
    phase: Phase = "not_started"
    status: RunStatus = "running"
    steps: list[StepRecord] = field(default_factory=list)
    error: ScriptError | None = None

    def step(self, name: str) -> StepRecord | None:
        for record in self.steps:
            if record.name == name:
                return record
        return None

    def payload(self) -> dict[str, object]:
        error: dict[str, object] | None = None
        if self.error is not None:
            error = {
                "code": self.error.code,
                "kind": self.error.kind,
                "message": str(self.error),
                "step": self.error.step,
            }
        return {
            "schema_version": 1,
            "tool": "rigctl",
            "run_id": self.run_id,
            "tenant": self.tenant,
            "coordinator": self.coordinator,
            "status": self.status,
            "phase": self.phase,
            "dry_run": self.dry_run,
            "report_folder": str(self.report_folder),
            "params": list(self.params),
            "steps": [record.payload() for record in self.steps],
            "error": error,
        }
