from __future__ import annotations

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from hypothesis import given
from hypothesis import strategies as st

from helpers import FakeCluster
from rigctl.core.context import RunContext
from rigctl.rig import RunRequest, TestRunOrchestrator, coordinator_name
from rigctl.settings import RigSettings

_POD = st.from_regex(r"[a-z0-9]([a-z0-9-]{0,30}[a-z0-9])?", fullmatch=True)
_PARAM = st.text(st.characters(exclude_categories=("Cs",), exclude_characters="\x00"), max_size=16)


@pytest.mark.unit
@given(st.sampled_from(["pod", "pods", "deployment.apps", "statefulset.apps"]), _POD)
def test_coordinator_name_strips_any_kind_prefix(kind: str, name: str) -> None:
    assert coordinator_name(f"{kind}/{name}") == name
    assert coordinator_name(f"{kind}/{name}\n") == name


@pytest.mark.unit
@given(_POD)
def test_coordinator_name_keeps_bare_names(name: str) -> None:
    assert coordinator_name(name) == name


@pytest.mark.unit
@given(st.lists(_PARAM, max_size=6), st.booleans())
def test_params_reach_engine_unchanged_and_in_order(params: list[str], once: bool) -> None:
    with tempfile.TemporaryDirectory() as td:
        root = Path(td)
        jmx = root / "plan.jmx"
        jmx.write_text("<jmeterTestPlan/>\n", encoding="utf-8")
        cluster = FakeCluster()
        ctx = RunContext.from_args("t-prop", str(root / "evidence"), cwd=td, quiet=True)
        request = RunRequest(
            tenant="perf",
            test_definition=jmx,
            report_folder=root / "out",
            init_once_on_coordinator=once,
            params=tuple(params),
        )
        with patch("rigctl.adapters._base.run_command", cluster):
            TestRunOrchestrator(ctx, RigSettings()).run(request)

    execs = cluster.execs()
    main = execs[-1]
    assert main[main.index("/plan.jmx") + 1 :] == params
    if once:
        first = execs[0]
        assert first[first.index("/plan.jmx") + 1 : -1] == params
    else:
        assert len(execs) == 1
