"""Sequential test-run orchestration against one JMeter coordinator pod.

The sequence is linear: discover, prepare, initialize, run, collect, tear
down. The first failing step aborts everything after it; nothing is retried.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from ..adapters.kubectl import Kubectl
from ..core.context import RunContext
from ..core.fs import ensure_dir
from ..core.logging import log_event
from ..core.process import CommandResult
from ..errors import DiscoveryError, LocalIOError, RemoteExecError, ScriptError, TransferError
from ..settings import RigSettings
from .model import Phase, RunReport, RunRequest, StepRecord, coordinator_name


def _tail(result: CommandResult, limit: int = 400) -> str:
    text = result.combined_output
    return text if len(text) <= limit else "..." + text[-limit:]


class TestRunOrchestrator:
    __test__ = False

    def __init__(self, ctx: RunContext, settings: RigSettings, kubectl: Kubectl | None = None) -> None:
        self.ctx = ctx
        self.settings = settings
        self.kubectl = kubectl or Kubectl(bin_name=settings.kubectl, timeout_seconds=settings.command_timeout_seconds)
        self.report: RunReport | None = None

    def run(self, request: RunRequest) -> RunReport:
        request = request.validate(self.ctx.cwd)
        report = RunReport(
            run_id=self.ctx.run_id,
            tenant=request.tenant,
            report_folder=request.resolved_report_folder,
            params=request.params,
            dry_run=self.ctx.dry_run,
        )
        self.report = report
        try:
            self._sequence(request, report)
        except ScriptError as exc:
            report.status = "error"
            report.error = exc
            raise
        report.status = "ok"
        self._enter(report, "done")
        return report

    def _sequence(self, request: RunRequest, report: RunReport) -> None:
        settings = self.settings
        tenant = request.tenant
        remote_test = settings.remote_test_path(request.test_definition)

        self._enter(report, "discovering")
        coordinator = self._step(
            report,
            "discover-coordinator",
            lambda: self.discover(tenant, settings.coordinator_selector, "coordinator"),
        )
        report.coordinator = coordinator

        self._enter(report, "preparing")
        if request.config_file is not None:
            config_file = request.config_file
            self._step(
                report,
                "push-user-properties",
                lambda: self._push(tenant, coordinator, config_file, settings.remote_config_path),
            )
        else:
            self._skip(report, "push-user-properties", "no user properties file")
        if request.seed_script is not None:
            seed_script = request.seed_script
            self._step(report, "seed-cache", lambda: self._seed_cache(tenant, seed_script))
        else:
            self._skip(report, "seed-cache", "no redis script")

        def push_test() -> str:
            return self._push(tenant, coordinator, request.test_definition, remote_test)

        test_pushed = False
        self._enter(report, "initializing")
        if request.init_once_on_coordinator:
            # the coordinator-only pass reads the test definition, so it goes up first
            self._step(report, "push-test", push_test)
            test_pushed = True
            once_args = [settings.once_wrapper, remote_test, *request.params, settings.coordinator_only_flag]
            self._step(
                report,
                "execute-once-on-coordinator",
                lambda: self._exec(tenant, coordinator, settings.wrapper_shell, once_args),
            )
        else:
            self._skip(report, "execute-once-on-coordinator", "not requested")

        self._enter(report, "running")
        if not test_pushed:
            self._step(report, "push-test", push_test)
        run_args = [settings.run_wrapper, remote_test, *request.params]
        self._step(report, "run-test", lambda: self._exec(tenant, coordinator, settings.wrapper_shell, run_args))

        self._enter(report, "collecting")
        self._collect(report, tenant, coordinator, report.report_folder)

        if request.delete_rig_after:
            self._enter(report, "tearing_down")
            self._step(report, "teardown", lambda: self._teardown(tenant))
        else:
            self._skip(report, "teardown", "test rig kept")

    def discover(self, namespace: str, selector: str, role: str) -> str:
        result = self.kubectl.find_pods(self.ctx, namespace, selector)
        if not result.ok:
            raise DiscoveryError(f"cannot list {role} pods in namespace `{namespace}`: {_tail(result)}")
        names = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not names:
            raise DiscoveryError(f"{role} not found: no running pod matches `{selector}` in namespace `{namespace}`")
        if len(names) > 1:
            found = ", ".join(coordinator_name(name) for name in names)
            raise DiscoveryError(f"{role} is ambiguous: {len(names)} pods match `{selector}` in `{namespace}`: {found}")
        return coordinator_name(names[0])

    def _push(self, namespace: str, pod: str, local: Path, remote: str) -> str:
        result = self.kubectl.copy_to(self.ctx, namespace, pod, local, remote)
        if not result.ok:
            raise TransferError(f"copy {local} -> {pod}:{remote} exited {result.code}: {_tail(result)}")
        return f"{local.name} -> {remote}"

    def _pull(self, namespace: str, pod: str, remote: str, local: Path) -> str:
        result = self.kubectl.copy_from(self.ctx, namespace, pod, remote, local)
        if not result.ok:
            raise TransferError(f"copy {pod}:{remote} -> {local} exited {result.code}: {_tail(result)}")
        if not self.ctx.dry_run and not local.exists():
            raise LocalIOError(f"artifact missing after copy: {local}")
        return f"{remote} -> {local}"

    def _exec(self, namespace: str, pod: str, command: str, args: list[str], stdin: str | None = None) -> str:
        result = self.kubectl.exec(self.ctx, namespace, pod, command, args, stdin=stdin)
        if not result.ok:
            raise RemoteExecError(f"`{command} {' '.join(args)}` on {pod} exited {result.code}: {_tail(result)}")
        return f"exit={result.code} duration_ms={result.duration_ms}"

    def _seed_cache(self, namespace: str, seed_script: Path) -> str:
        try:
            lines = [line for line in seed_script.read_text(encoding="utf-8").splitlines() if line.strip()]
        except (OSError, UnicodeDecodeError) as exc:
            raise LocalIOError(f"cannot read redis script {seed_script}: {exc}") from exc
        cache_pod = self.discover(namespace, self.settings.cache_selector, "cache")
        self._exec(namespace, cache_pod, self.settings.cache_cli, [], stdin="\n".join(lines) + "\n")
        return f"{len(lines)} commands -> {cache_pod}"

    def _collect(self, report: RunReport, namespace: str, pod: str, folder: Path) -> None:
        if not self.ctx.dry_run:
            self._step(report, "create-report-folder", lambda: str(ensure_dir(folder)))
        settings = self.settings
        artifacts = (
            ("collect-report", settings.remote_report_dir),
            ("collect-results-log", settings.remote_results_log),
            ("collect-engine-log", settings.remote_engine_log),
        )
        for name, remote in artifacts:
            local = folder / Path(remote).name
            self._step(report, name, lambda remote=remote, local=local: self._pull(namespace, pod, remote, local))

    def _teardown(self, namespace: str) -> str:
        selector = self.settings.worker_selector
        result = self.kubectl.scale_down(self.ctx, namespace, selector)
        if not result.ok:
            raise RemoteExecError(f"scale down of `{selector}` in `{namespace}` exited {result.code}: {_tail(result)}")
        return f"scaled `{selector}` to 0"

    def _enter(self, report: RunReport, phase: Phase) -> None:
        report.phase = phase
        log_event(self.ctx, "info", "orchestrator", "phase", phase=phase, tenant=report.tenant)

    def _step(self, report: RunReport, name: str, action: Callable[[], str]) -> str:
        log_event(self.ctx, "info", "orchestrator", "step-start", step=name)
        started = time.monotonic()
        try:
            detail = action()
        except ScriptError as exc:
            if exc.step is None:
                exc.step = name
            duration_ms = int((time.monotonic() - started) * 1000)
            report.steps.append(StepRecord(name, "failed", duration_ms, exc.message))
            log_event(self.ctx, "error", "orchestrator", "step-failed", step=name, kind=exc.kind, code=exc.code)
            raise
        duration_ms = int((time.monotonic() - started) * 1000)
        report.steps.append(StepRecord(name, "ok", duration_ms, detail))
        log_event(self.ctx, "info", "orchestrator", "step-ok", step=name, duration_ms=duration_ms)
        return detail

    def _skip(self, report: RunReport, name: str, reason: str) -> None:
        report.steps.append(StepRecord(name, "skipped", 0, reason))
        log_event(self.ctx, "info", "orchestrator", "step-skipped", step=name, reason=reason)
