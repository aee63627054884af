"""Input models: environment health reports and task run records.

Both come from collaborators outside this package (the interpreter probe and
the append-only run log) as JSON. ``from_dict`` accepts the camelCase wire
format those collaborators write; snake_case keys are accepted too. Optional
fields that are missing or malformed fall back to defaults; a missing
required field raises ``MalformedInputError``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import MalformedInputError
from .taxonomy import RUN_FAILED, weight_for

HEALTH_STATUSES = ("good", "warn", "bad", "unknown")
SEVERITIES = ("info", "warn", "bad")

_VERSION_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)")


def _get(data: dict, *keys: str, default: Any = None) -> Any:
    """First present key wins (camelCase wire name, then snake_case)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require(data: dict, kind: str, *keys: str) -> Any:
    value = _get(data, *keys)
    if value is None:
        raise MalformedInputError(kind, keys[0])
    return value


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_int(value: Any) -> Optional[int]:
    number = _as_number(value)
    if number is None or not math.isfinite(number):
        return None
    return int(number)


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v) for v in value if v is not None)


def _as_status(value: Any) -> str:
    return value if value in HEALTH_STATUSES else "unknown"


# ── Probe side ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProbeFinding:
    """One finding from the interpreter probe."""

    code: str
    severity: str  # info | warn | bad
    message: str = ""
    penalty: Optional[float] = None
    why: Optional[str] = None

    @property
    def effective_penalty(self) -> float:
        """Own penalty, or the taxonomy's standard weight for the code."""
        if self.penalty is not None:
            return self.penalty
        return weight_for(self.code)

    @classmethod
    def from_dict(cls, data: dict) -> ProbeFinding:
        severity = _get(data, "severity", default="warn")
        return cls(
            code=str(_require(data, "finding", "code")),
            severity=severity if severity in SEVERITIES else "warn",
            message=str(_get(data, "what", "message", default="")),
            penalty=_as_number(_get(data, "penalty")),
            why=_as_str(_get(data, "why")),
        )


@dataclass(frozen=True)
class Facts:
    """Interpreter facts reported by the probe. Every field is optional."""

    version: Optional[str] = None
    version_info: tuple[int, ...] = ()
    executable: Optional[str] = None
    prefix: Optional[str] = None
    base_prefix: Optional[str] = None
    bits: Optional[int] = None
    machine: Optional[str] = None
    os: Optional[str] = None

    @property
    def python_version(self) -> Optional[str]:
        """``major.minor`` from version_info, else parsed from the version text."""
        if len(self.version_info) >= 2:
            return f"{self.version_info[0]}.{self.version_info[1]}"
        if self.version:
            m = _VERSION_RE.search(self.version)
            if m:
                return f"{m.group(1)}.{m.group(2)}"
        return None

    @property
    def arch(self) -> Optional[str]:
        if self.bits == 64:
            return "x86_64"
        if self.bits == 32:
            return "x86"
        return None

    @classmethod
    def from_dict(cls, data: dict) -> Facts:
        version_info = _get(data, "version_info", "versionInfo", default=())
        bits = _as_int(_get(data, "bits"))
        return cls(
            version=_as_str(_get(data, "version")),
            version_info=tuple(v for v in version_info if isinstance(v, int))
            if isinstance(version_info, (list, tuple))
            else (),
            executable=_as_str(_get(data, "executable")),
            prefix=_as_str(_get(data, "prefix")),
            base_prefix=_as_str(_get(data, "base_prefix", "basePrefix")),
            bits=bits,
            machine=_as_str(_get(data, "machine")),
            os=_as_str(_get(data, "os")),
        )


@dataclass(frozen=True)
class EnvironmentReport:
    """Health report for one interpreter path. Immutable once received."""

    python_path: str
    status: str = "unknown"
    score: Optional[float] = None
    findings: tuple[ProbeFinding, ...] = ()
    facts: Optional[Facts] = None
    ran_at: Optional[str] = None
    summary: Optional[str] = None

    def has_code(self, code: str) -> bool:
        return any(f.code == code for f in self.findings)

    def codes(self) -> list[str]:
        return [f.code for f in self.findings]

    def dominant_issue(self) -> Optional[str]:
        """Highest-penalty non-info finding code (report order breaks ties)."""
        best: Optional[ProbeFinding] = None
        for f in self.findings:
            if f.severity == "info":
                continue
            if best is None or f.effective_penalty > best.effective_penalty:
                best = f
        return best.code if best else None

    @classmethod
    def from_dict(cls, data: dict) -> EnvironmentReport:
        facts = _get(data, "facts")
        findings = _get(data, "findings", default=[])
        return cls(
            python_path=str(_require(data, "report", "pythonPath", "python_path")),
            status=_as_status(_get(data, "status")),
            score=_as_number(_get(data, "score")),
            findings=tuple(
                ProbeFinding.from_dict(f) for f in findings if isinstance(f, dict)
            )
            if isinstance(findings, list)
            else (),
            facts=Facts.from_dict(facts) if isinstance(facts, dict) else None,
            ran_at=_as_str(_get(data, "ranAt", "ran_at")),
            summary=_as_str(_get(data, "summary")),
        )


# ── Run-log side ───────────────────────────────────────────────────


@dataclass(frozen=True)
class TaskRequirements:
    python: Optional[str] = None
    packages: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    require_x64: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> TaskRequirements:
        return cls(
            python=_as_str(_get(data, "python")),
            packages=_as_str_tuple(_get(data, "packages")),
            features=_as_str_tuple(_get(data, "features")),
            tags=_as_str_tuple(_get(data, "tags")),
            require_x64=bool(_get(data, "requireX64", "require_x64", default=False)),
        )


@dataclass(frozen=True)
class TaskDescriptor:
    name: str
    command: str
    args: tuple[str, ...] = ()
    requirements: Optional[TaskRequirements] = None

    @classmethod
    def from_dict(cls, data: dict) -> TaskDescriptor:
        req = _get(data, "requirements")
        return cls(
            name=str(_require(data, "task", "name")),
            command=str(_require(data, "task", "command")),
            args=_as_str_tuple(_get(data, "args")),
            requirements=TaskRequirements.from_dict(req) if isinstance(req, dict) else None,
        )


@dataclass(frozen=True)
class SelectedEnv:
    """The environment a task was routed to, with its score at selection time."""

    python_path: str
    env_id: Optional[str] = None
    score: Optional[float] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> SelectedEnv:
        status = _get(data, "status")
        return cls(
            python_path=str(_require(data, "selected", "pythonPath", "python_path")),
            env_id=_as_str(_get(data, "envId", "env_id")),
            score=_as_number(_get(data, "score")),
            status=status if status in HEALTH_STATUSES else None,
        )


@dataclass(frozen=True)
class RunOutcome:
    ok: bool
    exit_code: Optional[int] = None
    duration_ms: Optional[float] = None
    error_class: Optional[str] = None
    stderr_snippet: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> RunOutcome:
        return cls(
            ok=bool(_require(data, "outcome", "ok")),
            exit_code=_as_int(_get(data, "exitCode", "exit_code")),
            duration_ms=_as_number(_get(data, "durationMs", "duration_ms")),
            error_class=_as_str(_get(data, "errorClass", "error_class")),
            stderr_snippet=_as_str(_get(data, "stderrSnippet", "stderr_snippet")),
        )


@dataclass(frozen=True)
class ProbeDigest:
    """Probe verdict attached to a run, when the router probed before running."""

    dominant_issue: Optional[str] = None
    findings: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> ProbeDigest:
        return cls(
            dominant_issue=_as_str(_get(data, "dominantIssue", "dominant_issue")),
            findings=_as_str_tuple(_get(data, "findings")),
        )


@dataclass(frozen=True)
class RunRecord:
    """One task execution. ``at`` is an ISO-8601 timestamp string."""

    run_id: str
    at: str
    task: TaskDescriptor
    selected: SelectedEnv
    outcome: RunOutcome
    cwd: Optional[str] = None
    doctor: Optional[ProbeDigest] = None
    version: str = "1.0"

    @property
    def failure_code(self) -> str:
        """Probe dominant issue, else the run's error class, else RUN_FAILED."""
        if self.doctor is not None and self.doctor.dominant_issue:
            return self.doctor.dominant_issue
        return self.outcome.error_class or RUN_FAILED

    @classmethod
    def from_dict(cls, data: dict) -> RunRecord:
        doctor = _get(data, "doctor")
        for key in ("task", "selected", "outcome"):
            if not isinstance(data.get(key), dict):
                raise MalformedInputError("run record", key, _get(data, "runId", "run_id"))
        return cls(
            run_id=str(_get(data, "runId", "run_id", default="")),
            at=str(_require(data, "run record", "at")),
            task=TaskDescriptor.from_dict(data["task"]),
            selected=SelectedEnv.from_dict(data["selected"]),
            outcome=RunOutcome.from_dict(data["outcome"]),
            cwd=_as_str(_get(data, "cwd")),
            doctor=ProbeDigest.from_dict(doctor) if isinstance(doctor, dict) else None,
            version=str(_get(data, "version", default="1.0")),
        )
