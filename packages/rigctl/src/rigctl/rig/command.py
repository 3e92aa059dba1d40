from __future__ import annotations

import argparse
from pathlib import Path

from ..core.context import RunContext
from ..core.fs import dumps_json
from ..core.logging import log_event
from ..errors import ScriptError
from ..settings import RigSettings
from .model import RunRequest
from .orchestrator import TestRunOrchestrator
from .report import render_text, write_run_report

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean, got `{raw}`")


def configure_run_parser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    p = sub.add_parser(
        "run",
        help="run a distributed JMeter test on the tenant's rig",
        description="Engine parameters go after `--` and are forwarded verbatim, in order.",
    )
    p.add_argument("--tenant", required=True, help="namespace holding the test rig")
    p.add_argument("--test-name", required=True, help="local path of the .jmx test definition")
    p.add_argument("--report-folder", help="local destination for artifacts (default: report-<utc timestamp>)")
    rig = p.add_mutually_exclusive_group()
    rig.add_argument(
        "--delete-test-rig",
        dest="delete_test_rig",
        nargs="?",
        const=True,
        default=None,
        type=parse_bool,
        help="scale worker deployments to zero after the run (default: true)",
    )
    # None when neither flag is given; both flags must differ from it to count as used
    rig.add_argument(
        "--keep-test-rig", dest="delete_test_rig", action="store_false", default=None, help="leave the rig running"
    )
    p.add_argument("--user-properties", help="properties file pushed to the coordinator before the run")
    p.add_argument("--redis-script", help="file of redis commands streamed to the cache before the run")
    p.add_argument(
        "--execute-once-on-master",
        action="store_true",
        help="run the engine once on the coordinator alone before the distributed run",
    )
    p.add_argument("--dry-run", action="store_true", help="log the planned kubectl commands without running them")
    p.set_defaults(params=[])


def request_from_args(ns: argparse.Namespace) -> RunRequest:
    return RunRequest(
        tenant=ns.tenant,
        test_definition=Path(ns.test_name),
        report_folder=Path(ns.report_folder) if ns.report_folder else None,
        delete_rig_after=ns.delete_test_rig is not False,
        config_file=Path(ns.user_properties) if ns.user_properties else None,
        seed_script=Path(ns.redis_script) if ns.redis_script else None,
        init_once_on_coordinator=bool(ns.execute_once_on_master),
        params=tuple(ns.params),
    )


def run_run_command(ctx: RunContext, ns: argparse.Namespace, settings: RigSettings, as_json: bool) -> int:
    ctx = ctx.with_dry_run(bool(ns.dry_run))
    orchestrator = TestRunOrchestrator(ctx, settings)
    try:
        report = orchestrator.run(request_from_args(ns))
    except ScriptError:
        if orchestrator.report is not None:
            try:
                write_run_report(ctx, orchestrator.report)
            except ScriptError as exc:
                log_event(ctx, "error", "run", "report-write-failed", kind=exc.kind, code=exc.code, detail=exc.message)
        raise
    write_run_report(ctx, report)
    print(dumps_json(report.payload()) if as_json else render_text(report))
    return 0
