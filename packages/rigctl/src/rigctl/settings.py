"""Rig layout settings.

Defaults describe the stock JMeter-on-Kubernetes rig: a master pod labelled
``jmeter_mode=master``, slave deployments labelled ``jmeter_mode=slave`` and a
Redis pod labelled ``app=redis``. A YAML file can override any key; unknown
keys are rejected so typos do not silently fall back to defaults.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .core.env import getenv
from .core.schema import validate
from .errors import InputError

CONFIG_ENV = "RIGCTL_CONFIG"
KUBECTL_ENV = "RIGCTL_KUBECTL"


@dataclass(frozen=True)
class RigSettings:
    kubectl: str = "kubectl"
    coordinator_selector: str = "jmeter_mode=master"
    cache_selector: str = "app=redis"
    worker_selector: str = "jmeter_mode=slave"
    remote_test_dir: str = "/"
    remote_config_path: str = "/opt/jmeter/apache-jmeter/bin/user.properties"
    run_wrapper: str = "/load_test"
    once_wrapper: str = "/load_test_once"
    wrapper_shell: str = "/bin/bash"
    coordinator_only_flag: str = "-Jexecute_once_on_master=true"
    remote_report_dir: str = "/report"
    remote_results_log: str = "/results.log"
    remote_engine_log: str = "/jmeter.log"
    cache_cli: str = "redis-cli"
    command_timeout_seconds: int = 0

    def remote_test_path(self, test_definition: Path) -> str:
        return f"{self.remote_test_dir.rstrip('/')}/{test_definition.name}"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise InputError(f"cannot read rig config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise InputError(f"invalid YAML in rig config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InputError(f"{path}: root must be mapping")
    return data


def load_settings(config_path: Path | None = None) -> RigSettings:
    """Build settings from defaults, an optional YAML file and env overrides.

    The file comes from ``config_path`` or, failing that, ``$RIGCTL_CONFIG``.
    ``$RIGCTL_KUBECTL`` wins over both for the kubectl binary.
    """
    settings = RigSettings()
    source = config_path
    if source is None:
        env_path = getenv(CONFIG_ENV)
        source = Path(env_path) if env_path else None
    if source is not None:
        data = _read_yaml(source)
        validate("rig-settings", data)
        known = {f.name for f in fields(RigSettings)}
        settings = replace(settings, **{k: v for k, v in data.items() if k in known})
    kubectl = getenv(KUBECTL_ENV)
    if kubectl:
        settings = replace(settings, kubectl=kubectl)
    return settings
