"""Shared test fixtures for envmap tests."""

import os

import pytest

from envmap.config import MapOptions
from envmap.graph.models import HostInfo
from envmap.models import (
    EnvironmentReport,
    Facts,
    ProbeDigest,
    ProbeFinding,
    RunOutcome,
    RunRecord,
    SelectedEnv,
    TaskDescriptor,
    TaskRequirements,
)

FIXED_TIME = "2026-01-01T00:00:00.000Z"
FIXED_HOST = HostInfo(os="linux", arch="x86_64", hostname="test-host")


def build_report(
    path="/home/u/proj/.venv/bin/python",
    status="good",
    score=90,
    codes=(),
    base_prefix="/usr",
    version_info=(3, 11, 4),
    bits=64,
    ran_at=None,
    severity="warn",
):
    """EnvironmentReport with one finding per code (all the same severity)."""
    findings = tuple(ProbeFinding(code=c, severity=severity, message=f"{c} found") for c in codes)
    facts = None
    if base_prefix is not None or version_info is not None:
        facts = Facts(
            version_info=tuple(version_info or ()),
            base_prefix=base_prefix,
            bits=bits,
        )
    return EnvironmentReport(
        python_path=path,
        status=status,
        score=score,
        findings=findings,
        facts=facts,
        ran_at=ran_at,
    )


def build_run(
    run_id="r1",
    name="test",
    command="pytest tests/",
    path="/home/u/proj/.venv/bin/python",
    ok=True,
    at="2026-01-01T10:00:00Z",
    error_class=None,
    dominant_issue=None,
    packages=(),
    selected_status=None,
    selected_score=None,
):
    requirements = TaskRequirements(packages=tuple(packages)) if packages else None
    return RunRecord(
        run_id=run_id,
        at=at,
        task=TaskDescriptor(name=name, command=command, requirements=requirements),
        selected=SelectedEnv(python_path=path, status=selected_status, score=selected_score),
        outcome=RunOutcome(ok=ok, exit_code=0 if ok else 1, error_class=error_class),
        doctor=ProbeDigest(dominant_issue=dominant_issue) if dominant_issue else None,
    )


def build_runs(ok, fail, path="/envs/a/bin/python", name="test", command="pytest", error_class="ImportError"):
    """``ok`` passing runs then ``fail`` failing runs of one task on one env."""
    runs = []
    for i in range(ok):
        runs.append(build_run(run_id=f"{name}-ok-{i}", name=name, command=command, path=path, ok=True))
    for i in range(fail):
        runs.append(
            build_run(
                run_id=f"{name}-fail-{i}",
                name=name,
                command=command,
                path=path,
                ok=False,
                error_class=error_class,
            )
        )
    return runs


@pytest.fixture
def make_report():
    """Factory for EnvironmentReport values."""
    return build_report


@pytest.fixture
def make_run():
    """Factory for RunRecord values."""
    return build_run


@pytest.fixture
def make_runs():
    """Factory for a batch of passing and failing runs of one task."""
    return build_runs


@pytest.fixture
def per_run_options():
    return MapOptions(task_mode="runs")


@pytest.fixture
def fixed_time():
    return FIXED_TIME


@pytest.fixture
def fixed_host():
    return FIXED_HOST


@pytest.fixture
def report_dicts():
    """Probe reports as they appear on the wire (camelCase)."""
    return [
        {
            "pythonPath": "/home/u/api/.venv/bin/python",
            "status": "good",
            "score": 92,
            "ranAt": "2026-01-02T09:00:00Z",
            "findings": [
                {"code": "OUTDATED_INSTALL_TOOLING", "severity": "info", "what": "pip is old", "penalty": 0}
            ],
            "facts": {
                "version": "3.11.4 (main)",
                "version_info": [3, 11, 4, "final", 0],
                "executable": "/home/u/api/.venv/bin/python",
                "prefix": "/home/u/api/.venv",
                "base_prefix": "/usr",
                "bits": 64,
            },
        },
        {
            "pythonPath": "/home/u/ml/.venv/bin/python",
            "status": "bad",
            "score": 35,
            "ranAt": "2026-01-02T09:05:00Z",
            "findings": [
                {"code": "SSL_BROKEN", "severity": "bad", "what": "ssl import failed", "penalty": 40},
                {"code": "USER_SITE_LEAK", "severity": "warn", "what": "user site on path", "penalty": 20},
            ],
            "facts": {
                "version_info": [3, 11, 4],
                "prefix": "/home/u/ml/.venv",
                "base_prefix": "/usr",
                "bits": 64,
            },
        },
    ]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project config files and ENVMAP_* variables out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for key in list(os.environ):
        if key.startswith("ENVMAP_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
