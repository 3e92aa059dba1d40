from __future__ import annotations

import socket
from pathlib import Path

import pytest
from hypothesis import settings

from helpers import FakeCluster
from rigctl.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

settings.register_profile("rigctl", deadline=None, max_examples=40)
settings.load_profile("rigctl")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def clean_rig_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RIGCTL_CONFIG", "RIGCTL_KUBECTL", "RUN_ID", "EVIDENCE_ROOT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ctx(tmp_path: Path) -> RunContext:
    return RunContext.from_args("t-run", str(tmp_path / "evidence"), cwd=str(tmp_path), quiet=True)


@pytest.fixture
def jmx(tmp_path: Path) -> Path:
    path = tmp_path / "checkout.jmx"
    path.write_text("<jmeterTestPlan/>\n", encoding="utf-8")
    return path


@pytest.fixture
def cluster(monkeypatch: pytest.MonkeyPatch) -> FakeCluster:
    fake = FakeCluster()
    monkeypatch.setattr("rigctl.adapters._base.run_command", fake)
    return fake
