"""Report selection for the map."""

from __future__ import annotations

from typing import Iterable, Optional

from ..config import ReportFilter
from ..identity import norm_path
from ..models import EnvironmentReport


def should_include_report(
    report: EnvironmentReport,
    report_filter: ReportFilter,
    case_insensitive: Optional[bool] = None,
) -> bool:
    """Whether a report survives the filter.

    A missing score counts as 0 against ``min_score``. Codes use OR
    semantics: one matching finding code keeps the report.
    """
    if report_filter.min_score is not None:
        score = report.score if report.score is not None else 0
        if score < report_filter.min_score:
            return False

    if report_filter.paths_under:
        path = norm_path(report.python_path, case_insensitive)
        if not path.startswith(norm_path(report_filter.paths_under, case_insensitive)):
            return False

    if report_filter.codes:
        if not any(report.has_code(code) for code in report_filter.codes):
            return False

    return True


def filter_reports(
    reports: Iterable[EnvironmentReport],
    report_filter: ReportFilter,
    case_insensitive: Optional[bool] = None,
) -> list[EnvironmentReport]:
    """Surviving reports, in input order."""
    if report_filter.is_empty:
        return list(reports)
    return [r for r in reports if should_include_report(r, report_filter, case_insensitive)]
