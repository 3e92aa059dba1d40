from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

from rigctl.core.process import CommandResult

ROOT = Path(__file__).resolve().parents[3]
SRC = ROOT / "packages/rigctl/src"

MASTER = "pod/jmeter-master-0"
REDIS = "pod/redis-0"


@dataclass
class FakeCluster:
    """Stand-in for ``run_command`` that answers kubectl invocations.

    ``pods`` maps a label selector to the names ``kubectl get -o name`` would
    print. ``fail_on`` maps a substring of the rendered command to the exit
    code it should return.
    """

    pods: dict[str, list[str]] = field(
        default_factory=lambda: {"jmeter_mode=master": [MASTER], "app=redis": [REDIS]}
    )
    fail_on: dict[str, int] = field(default_factory=dict)
    materialize: bool = True
    calls: list[list[str]] = field(default_factory=list)
    inputs: list[str | None] = field(default_factory=list)

    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        timeout_seconds: int = 0,
        input_text: str | None = None,
        ctx: object = None,
    ) -> CommandResult:
        self.calls.append(list(cmd))
        self.inputs.append(input_text)
        rendered = " ".join(cmd)
        for needle, code in self.fail_on.items():
            if needle in rendered:
                return CommandResult(code, "", f"simulated failure for `{needle}`", 1)
        args = cmd[1:]
        if args[:2] == ["get", "pods"]:
            selector = args[args.index("-l") + 1]
            return CommandResult(0, "".join(f"{name}\n" for name in self.pods.get(selector, [])), "", 1)
        if args[:1] == ["cp"] and ":" in args[1] and self.materialize:
            remote = args[1].split(":", 1)[1]
            dest = Path(args[2])
            if remote == "/report":
                dest.mkdir(parents=True, exist_ok=True)
                (dest / "index.html").write_text("<html></html>\n", encoding="utf-8")
            else:
                dest.write_text(f"{remote}\n", encoding="utf-8")
        return CommandResult(0, "", "", 1)

    def verbs(self) -> list[str]:
        return [call[1] for call in self.calls]

    def execs(self) -> list[list[str]]:
        return [call for call in self.calls if call[1] == "exec"]

    def copies(self) -> list[list[str]]:
        return [call for call in self.calls if call[1] == "cp"]


FAKE_KUBECTL = '''
import json
import os
import sys
from pathlib import Path

args = sys.argv[1:]
stdin = sys.stdin.read() if args[:2] == ["exec", "-i"] else None
with open(os.environ["FAKE_KUBECTL_LOG"], "a", encoding="utf-8") as handle:
    handle.write(json.dumps({"args": args, "stdin": stdin}) + "\\n")
pods = json.loads(os.environ.get("FAKE_KUBECTL_PODS", "{}"))
if args[:2] == ["get", "pods"]:
    for name in pods.get(args[args.index("-l") + 1], []):
        print(name)
elif args[:1] == ["cp"] and ":" in args[1]:
    remote = args[1].split(":", 1)[1]
    dest = Path(args[2])
    if remote == "/report":
        dest.mkdir(parents=True, exist_ok=True)
        (dest / "index.html").write_text("<html></html>", encoding="utf-8")
    else:
        dest.write_text("log\\n", encoding="utf-8")
elif args[:1] == ["version"]:
    print("Client Version: v1.30.0")
sys.exit(int(os.environ.get("FAKE_KUBECTL_EXIT", "0")) if args[:1] == ["exec"] else 0)
'''


def install_fake_kubectl(bin_dir: Path) -> Path:
    bin_dir.mkdir(parents=True, exist_ok=True)
    script = bin_dir / "kubectl"
    script.write_text(f"#!{sys.executable}\n{FAKE_KUBECTL}", encoding="utf-8")
    script.chmod(0o755)
    return script


def run_rigctl(*args: str, cwd: Path, env_extra: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC)
    env.pop("RIGCTL_CONFIG", None)
    env.update(env_extra or {})
    return subprocess.run(
        [sys.executable, "-m", "rigctl", *args],
        cwd=cwd,
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )
