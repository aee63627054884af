"""Tests for the input models."""

import pytest

from envmap.exceptions import MalformedInputError
from envmap.models import EnvironmentReport, Facts, ProbeFinding, RunRecord


class TestEnvironmentReportFromDict:
    """Wire parsing of probe reports."""

    def test_camel_case_fields(self, report_dicts):
        report = EnvironmentReport.from_dict(report_dicts[1])
        assert report.python_path == "/home/u/ml/.venv/bin/python"
        assert report.status == "bad"
        assert report.score == 35
        assert report.ran_at == "2026-01-02T09:05:00Z"
        assert report.codes() == ["SSL_BROKEN", "USER_SITE_LEAK"]
        assert report.findings[0].message == "ssl import failed"
        assert report.facts.base_prefix == "/usr"

    def test_unknown_status_becomes_unknown(self):
        report = EnvironmentReport.from_dict({"pythonPath": "/p", "status": "weird"})
        assert report.status == "unknown"

    def test_missing_optional_fields(self):
        report = EnvironmentReport.from_dict({"python_path": "/p"})
        assert report.score is None
        assert report.findings == ()
        assert report.facts is None

    def test_missing_path_raises(self):
        with pytest.raises(MalformedInputError):
            EnvironmentReport.from_dict({"status": "good"})

    def test_non_numeric_score_ignored(self):
        report = EnvironmentReport.from_dict({"pythonPath": "/p", "score": "high"})
        assert report.score is None

    def test_non_string_optional_fields_dropped(self):
        report = EnvironmentReport.from_dict(
            {
                "pythonPath": "/p",
                "ranAt": 5,
                "summary": ["x"],
                "findings": [{"code": "SSL_BROKEN", "why": {"a": 1}}],
                "facts": {"version": 3.11, "prefix": 1, "base_prefix": 42, "executable": False},
            }
        )
        assert report.ran_at is None
        assert report.summary is None
        assert report.findings[0].why is None
        assert report.facts == Facts()
        assert report.facts.python_version is None


class TestDominantIssue:
    """Highest-penalty non-info finding."""

    def test_highest_penalty_wins(self):
        report = EnvironmentReport(
            python_path="/p",
            findings=(
                ProbeFinding("USER_SITE_LEAK", "warn", penalty=20),
                ProbeFinding("SSL_BROKEN", "bad", penalty=40),
            ),
        )
        assert report.dominant_issue() == "SSL_BROKEN"

    def test_info_findings_ignored(self):
        report = EnvironmentReport(
            python_path="/p",
            findings=(ProbeFinding("OUTDATED_INSTALL_TOOLING", "info", penalty=99),),
        )
        assert report.dominant_issue() is None

    def test_taxonomy_weight_when_penalty_missing(self):
        """DLL_LOAD_FAIL (55) outranks PIP_CHECK_FAIL (25) without penalties."""
        report = EnvironmentReport(
            python_path="/p",
            findings=(
                ProbeFinding("PIP_CHECK_FAIL", "warn"),
                ProbeFinding("DLL_LOAD_FAIL", "bad"),
            ),
        )
        assert report.dominant_issue() == "DLL_LOAD_FAIL"

    def test_tie_keeps_report_order(self):
        report = EnvironmentReport(
            python_path="/p",
            findings=(
                ProbeFinding("B_CODE", "warn", penalty=10),
                ProbeFinding("A_CODE", "warn", penalty=10),
            ),
        )
        assert report.dominant_issue() == "B_CODE"


class TestFacts:
    """Version and arch derivation."""

    def test_version_from_version_info(self):
        assert Facts(version_info=(3, 12, 1)).python_version == "3.12"

    def test_version_parsed_from_text(self):
        assert Facts(version="3.10.13 (main, Jan 1)").python_version == "3.10"

    def test_version_absent(self):
        assert Facts().python_version is None

    def test_arch_from_bits(self):
        assert Facts(bits=64).arch == "x86_64"
        assert Facts(bits=32).arch == "x86"
        assert Facts().arch is None


class TestRunRecord:
    """Run log records."""

    def _record(self, **outcome):
        return {
            "version": "1.0",
            "runId": "r1",
            "at": "2026-01-01T00:00:00Z",
            "task": {
                "name": "test",
                "command": "pytest",
                "requirements": {"packages": ["numpy"], "requireX64": True},
            },
            "selected": {"pythonPath": "/p", "score": 80, "status": "good"},
            "outcome": {"ok": False, **outcome},
        }

    def test_from_dict(self):
        run = RunRecord.from_dict(self._record(exitCode=1, errorClass="ImportError"))
        assert run.run_id == "r1"
        assert run.task.requirements.packages == ("numpy",)
        assert run.task.requirements.require_x64 is True
        assert run.selected.status == "good"
        assert run.outcome.exit_code == 1

    def test_failure_code_prefers_probe_issue(self):
        data = self._record(errorClass="ImportError")
        data["doctor"] = {"dominantIssue": "SSL_BROKEN"}
        assert RunRecord.from_dict(data).failure_code == "SSL_BROKEN"

    def test_failure_code_falls_back_to_error_class(self):
        assert RunRecord.from_dict(self._record(errorClass="ImportError")).failure_code == "ImportError"

    def test_failure_code_default(self):
        assert RunRecord.from_dict(self._record()).failure_code == "RUN_FAILED"

    def test_missing_outcome_raises(self):
        data = self._record()
        del data["outcome"]
        with pytest.raises(MalformedInputError):
            RunRecord.from_dict(data)

    def test_non_string_optional_fields_dropped(self):
        data = self._record(exitCode="1", errorClass=7, stderrSnippet=0)
        data["cwd"] = 3
        data["selected"]["envId"] = 9
        data["task"]["requirements"]["python"] = 3.11
        data["doctor"] = {"dominantIssue": 12}
        run = RunRecord.from_dict(data)
        assert run.outcome.exit_code is None
        assert run.outcome.error_class is None
        assert run.outcome.stderr_snippet is None
        assert run.cwd is None
        assert run.selected.env_id is None
        assert run.task.requirements.python is None
        assert run.failure_code == "RUN_FAILED"

    def test_float_exit_code_becomes_int(self):
        assert RunRecord.from_dict(self._record(exitCode=2.0)).outcome.exit_code == 2
