from __future__ import annotations

import argparse
import shutil

from .. import __version__
from ..adapters.kubectl import Kubectl
from ..core.context import RunContext
from ..core.fs import dumps_json
from ..errors import DiscoveryError
from ..exit_codes import ERR_COORDINATOR, ERR_REMOTE, OK
from ..rig.orchestrator import TestRunOrchestrator
from ..settings import RigSettings


def configure_doctor_parser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    p = sub.add_parser("doctor", help="check kubectl and, optionally, coordinator discovery")
    p.add_argument("--tenant", help="namespace whose coordinator should be discoverable")


def run_doctor_command(ctx: RunContext, ns: argparse.Namespace, settings: RigSettings, as_json: bool) -> int:
    kubectl = Kubectl(bin_name=settings.kubectl, timeout_seconds=settings.command_timeout_seconds)
    checks: list[dict[str, object]] = []
    code = OK

    resolved = shutil.which(settings.kubectl)
    checks.append({"id": "kubectl-on-path", "ok": resolved is not None, "detail": resolved or settings.kubectl})
    if resolved is None:
        code = ERR_REMOTE
    else:
        version = kubectl.client_version(ctx)
        first_line = (version.combined_output.splitlines() or [""])[0]
        checks.append({"id": "kubectl-client", "ok": version.ok, "detail": first_line})
        if not version.ok:
            code = ERR_REMOTE

    if ns.tenant and code == OK:
        orchestrator = TestRunOrchestrator(ctx, settings, kubectl=kubectl)
        try:
            name = orchestrator.discover(ns.tenant, settings.coordinator_selector, "coordinator")
            checks.append({"id": "coordinator", "ok": True, "detail": name})
        except DiscoveryError as exc:
            checks.append({"id": "coordinator", "ok": False, "detail": exc.message})
            code = ERR_COORDINATOR

    payload = {
        "schema_version": 1,
        "tool": "rigctl",
        "version": __version__,
        "run_id": ctx.run_id,
        "status": "ok" if code == OK else "error",
        "settings": settings.as_dict(),
        "checks": checks,
    }
    if as_json:
        print(dumps_json(payload))
    else:
        for check in checks:
            print(f"{'ok ' if check['ok'] else 'FAIL'} {check['id']}: {check['detail']}")
    return code
