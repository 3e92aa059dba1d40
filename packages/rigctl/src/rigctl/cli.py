from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import __version__
from .core.context import RunContext
from .core.fs import dumps_json
from .core.logging import log_event
from .doctor.command import configure_doctor_parser, run_doctor_command
from .errors import ScriptError
from .exit_codes import ERR_INPUT, ERR_INTERNAL, OK
from .rig.command import configure_run_parser, run_run_command
from .settings import load_settings

PASSTHROUGH_MARKER = "--"


class RigArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(ERR_INPUT, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = RigArgumentParser(
        prog="rigctl",
        description="Drive a distributed JMeter test rig running on Kubernetes.",
        epilog="Arguments after a bare `--` are forwarded verbatim to the engine.",
    )
    p.add_argument("--version", action="version", version=_version_string())
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--run-id", help="run identifier for the run report")
    p.add_argument("--evidence-root", help="directory receiving run reports")
    p.add_argument("--cwd", help="working directory used to resolve relative paths")
    p.add_argument("--config", help="YAML file overriding rig selectors and remote paths")
    p.add_argument("--log-json", action="store_true", help="emit structured logs as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="print version")
    configure_run_parser(sub)
    configure_doctor_parser(sub)
    return p


def _version_string() -> str:
    return f"rigctl {__version__}"


def split_passthrough(argv: list[str]) -> tuple[list[str], list[str]]:
    if PASSTHROUGH_MARKER not in argv:
        return argv, []
    idx = argv.index(PASSTHROUGH_MARKER)
    return argv[:idx], argv[idx + 1 :]


def render_error(*, as_json: bool, exc: ScriptError, run_id: str) -> str:
    if as_json:
        return dumps_json(
            {
                "schema_version": 1,
                "tool": "rigctl",
                "status": "error",
                "run_id": run_id,
                "errors": [{"code": exc.code, "kind": exc.kind, "step": exc.step, "message": str(exc)}],
            }
        )
    return f"rigctl: error: {exc}"


def main(argv: list[str] | None = None) -> int:
    raw_argv = list(argv if argv is not None else sys.argv[1:])
    own_argv, params = split_passthrough(raw_argv)
    parser = build_parser()
    ns = parser.parse_args(own_argv)
    if params and ns.cmd != "run":
        parser.error("engine parameters after `--` are only accepted by `run`")
    if ns.cmd == "run":
        ns.params = params
    if ns.cmd == "version":
        print(_version_string())
        return OK

    output_format = "json" if ns.json else (ns.format or "text")
    ctx = RunContext.from_args(
        ns.run_id,
        ns.evidence_root,
        cwd=ns.cwd,
        output_format=output_format,
        verbose=ns.verbose,
        quiet=ns.quiet,
        log_json=ns.log_json,
    )
    as_json = ctx.output_format == "json"
    try:
        settings = load_settings(ctx.resolve(ns.config) if ns.config else None)
        if ctx.verbose:
            log_event(ctx, "info", "cli", "start", cmd=ns.cmd, cwd=str(ctx.cwd), kubectl=settings.kubectl)
        if ns.cmd == "run":
            return run_run_command(ctx, ns, settings, as_json)
        if ns.cmd == "doctor":
            return run_doctor_command(ctx, ns, settings, as_json)
        raise ScriptError(f"unknown command: {ns.cmd}", ERR_INTERNAL)
    except ScriptError as exc:
        log_event(ctx, "error", "cli", "failed", cmd=ns.cmd, kind=exc.kind, code=exc.code, step=exc.step or "-")
        print(render_error(as_json=as_json, exc=exc, run_id=ctx.run_id), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(
            render_error(as_json=as_json, exc=ScriptError(f"internal error: {exc}", ERR_INTERNAL), run_id=ctx.run_id),
            file=sys.stderr,
        )
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
