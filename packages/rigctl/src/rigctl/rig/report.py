from __future__ import annotations

from pathlib import Path

from ..core.context import RunContext
from ..core.fs import write_json
from ..core.schema import validate
from ..errors import ScriptError
from .model import RunReport

RUN_REPORT_NAME = "run-report.json"


def run_report_path(ctx: RunContext) -> Path:
    return ctx.run_dir / RUN_REPORT_NAME


def write_run_report(ctx: RunContext, report: RunReport) -> Path:
    payload = report.payload()
    validate("run-report", payload, error_cls=ScriptError)
    return write_json(run_report_path(ctx), payload)


def render_text(report: RunReport) -> str:
    done = sum(1 for record in report.steps if record.status == "ok")
    skipped = sum(1 for record in report.steps if record.status == "skipped")
    return (
        f"run {report.status}: tenant={report.tenant} coordinator={report.coordinator or '-'} "
        f"phase={report.phase} steps_ok={done} steps_skipped={skipped} report_folder={report.report_folder}"
    )
