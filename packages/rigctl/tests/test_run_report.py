from __future__ import annotations

import json
from pathlib import Path

import pytest

from rigctl.core.context import RunContext
from rigctl.core.schema import validate
from rigctl.errors import InputError, RemoteExecError
from rigctl.rig.model import RunReport, StepRecord
from rigctl.rig.report import render_text, run_report_path, write_run_report


def _report(tmp_path: Path) -> RunReport:
    report = RunReport(run_id="t-run", tenant="perf", report_folder=tmp_path / "out", params=("-Jusers=1",))
    report.coordinator = "jmeter-master-0"
    report.steps.append(StepRecord("discover-coordinator", "ok", 3, "jmeter-master-0"))
    report.steps.append(StepRecord("seed-cache", "skipped", 0, "no redis script"))
    return report


def test_run_report_lands_under_run_dir(ctx: RunContext, tmp_path: Path) -> None:
    path = write_run_report(ctx, _report(tmp_path))
    assert path == run_report_path(ctx) == tmp_path / "evidence/t-run/run-report.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["params"] == ["-Jusers=1"]
    assert payload["error"] is None
    assert [step["status"] for step in payload["steps"]] == ["ok", "skipped"]


def test_failed_report_carries_error(ctx: RunContext, tmp_path: Path) -> None:
    report = _report(tmp_path)
    report.phase = "running"
    report.status = "error"
    report.error = RemoteExecError("engine exited 1", step="run-test")
    payload = json.loads(write_run_report(ctx, report).read_text(encoding="utf-8"))
    assert payload["error"] == {
        "code": 2,
        "kind": "remote_exec_error",
        "message": "step `run-test` failed: engine exited 1",
        "step": "run-test",
    }


def test_run_report_schema_rejects_unknown_keys(tmp_path: Path) -> None:
    payload = _report(tmp_path).payload()
    payload["extra"] = True
    with pytest.raises(InputError, match="run-report"):
        validate("run-report", payload)


def test_render_text_summarizes(tmp_path: Path) -> None:
    line = render_text(_report(tmp_path))
    assert line.startswith("run running: tenant=perf coordinator=jmeter-master-0")
    assert "steps_ok=1 steps_skipped=1" in line
