"""Tests for the graph summary."""

from envmap.config import MapOptions
from envmap.graph import build_graph, count_top_issues


class TestCounts:
    """Type-filtered counts and health buckets."""

    def test_counts(self, make_report, make_run):
        reports = [
            make_report(path="/a/bin/python", status="good"),
            make_report(path="/b/bin/python", status="warn", base_prefix="/opt"),
            make_report(path="/c/bin/python", status="bad"),
        ]
        summary = build_graph(reports, [make_run(path="/a/bin/python")]).summary
        assert summary.env_count == 3
        assert summary.base_count == 2
        assert summary.task_count == 1
        assert (summary.healthy, summary.warning, summary.broken) == (1, 1, 1)

    def test_buckets_ignore_base_and_task_nodes(self, make_report, make_runs):
        """A failing task cluster is bad but is not a broken env."""
        summary = build_graph([make_report(status="good")], make_runs(0, 2)).summary
        assert summary.broken == 0


class TestTopIssues:
    """Non-info codes by occurrence across surviving reports."""

    def test_ranked_by_count(self, make_report):
        reports = [
            make_report(path="/a", codes=("PIP_MISSING",)),
            make_report(path="/b", codes=("SSL_BROKEN",)),
            make_report(path="/c", codes=("SSL_BROKEN",)),
        ]
        top = count_top_issues(reports, 10)
        assert [(t.code, t.count) for t in top] == [("SSL_BROKEN", 2), ("PIP_MISSING", 1)]
        assert "OpenSSL" in top[0].hint

    def test_ties_keep_first_seen(self, make_report):
        reports = [make_report(path="/a", codes=("B_CODE", "A_CODE"))]
        assert [t.code for t in count_top_issues(reports, 10)] == ["B_CODE", "A_CODE"]

    def test_info_excluded(self, make_report):
        reports = [make_report(codes=("OUTDATED_INSTALL_TOOLING",), severity="info")]
        assert count_top_issues(reports, 10) == []

    def test_capped(self, make_report):
        reports = [make_report(path=f"/{c}", codes=(c,)) for c in ("A", "B", "C")]
        options = MapOptions(max_top_issues=2)
        assert len(build_graph(reports, options=options).summary.top_issues) == 2

    def test_unknown_code_gets_fallback_hint(self, make_report):
        top = count_top_issues([make_report(codes=("BRAND_NEW",))], 10)
        assert "recreating the venv" in top[0].hint
