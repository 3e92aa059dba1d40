from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..core.context import RunContext
from ..core.process import CommandResult
from ._base import CliAdapter


@dataclass(frozen=True)
class Kubectl(CliAdapter):
    """Thin wrapper over the kubectl verbs the rig needs.

    Every call returns the raw ``CommandResult``; deciding whether a non-zero
    code is fatal belongs to the caller.
    """

    bin_name: str = "kubectl"

    def find_pods(self, ctx: RunContext, namespace: str, selector: str) -> CommandResult:
        return self.run(
            ctx, "get", "pods", "-n", namespace, "-l", selector, "--field-selector=status.phase=Running", "-o", "name"
        )

    def copy_to(self, ctx: RunContext, namespace: str, pod: str, local: Path, remote: str) -> CommandResult:
        return self.run(ctx, "cp", str(local), f"{namespace}/{pod}:{remote}")

    def copy_from(self, ctx: RunContext, namespace: str, pod: str, remote: str, local: Path) -> CommandResult:
        return self.run(ctx, "cp", f"{namespace}/{pod}:{remote}", str(local))

    def exec(
        self,
        ctx: RunContext,
        namespace: str,
        pod: str,
        command: str,
        args: Sequence[str] = (),
        stdin: str | None = None,
    ) -> CommandResult:
        flags = ["exec", "-i"] if stdin is not None else ["exec"]
        return self.run(ctx, *flags, "-n", namespace, pod, "--", command, *args, input_text=stdin)

    def scale_down(self, ctx: RunContext, namespace: str, selector: str) -> CommandResult:
        return self.run(ctx, "scale", "deployment", "-n", namespace, "-l", selector, "--replicas=0")

    def client_version(self, ctx: RunContext) -> CommandResult:
        return self.run(ctx, "version", "--client")

    def dry_run_stdout(self, *args: str) -> str:
        if args[:2] == ("get", "pods") and "-l" in args:
            selector = args[args.index("-l") + 1]
            return f"pod/<{selector}>\n"
        return ""
