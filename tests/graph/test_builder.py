"""Tests for environment and base node construction."""

from envmap.config import MapOptions, ReportFilter
from envmap.graph import build_graph
from envmap.graph.labels import env_label
from envmap.identity import fingerprint, stable_id
from envmap.models import EnvironmentReport, Facts


def _build(reports, runs=(), options=None, fixed_time=None, fixed_host=None):
    return build_graph(reports, runs, options=options, generated_at=fixed_time, host=fixed_host)


class TestEnvironmentNodes:
    """One venv node per surviving report."""

    def test_node_fields(self, make_report):
        report = make_report(
            path="/home/u/proj/.venv/bin/python",
            status="warn",
            score=70,
            codes=("SSL_BROKEN",),
            ran_at="2026-01-02T00:00:00Z",
        )
        graph = _build([report])
        env = graph.nodes_of_type("venv")[0]

        assert env.id == stable_id("env", "/home/u/proj/.venv/bin/python")
        assert env.label == "proj/.venv"
        assert env.path == "/home/u/proj/.venv/bin/python"
        assert env.python.version == "3.11"
        assert env.python.arch == "x86_64"
        assert env.status == "warn"
        assert env.score == 70
        assert [i.code for i in env.health.issues] == ["SSL_BROKEN"]
        assert env.last_seen_at == "2026-01-02T00:00:00Z"

    def test_features(self, make_report):
        leaky = make_report(path="/a/bin/python", codes=("USER_SITE_LEAK", "PYTHONPATH_INJECTED"))
        clean = make_report(path="/b/bin/python", codes=("SSL_BROKEN",))
        graph = _build([leaky, clean])
        a, b = graph.nodes_of_type("venv")
        assert a.features == ("ssl:ok", "usersite:leak", "pythonpath:set")
        assert b.features == ("ssl:broken", "usersite:clean", "pythonpath:clean")

    def test_env_fingerprint(self, make_report):
        report = make_report(path="/a/bin/python", codes=("SSL_BROKEN",))
        env = _build([report]).nodes_of_type("venv")[0]
        assert env.fingerprints.env == fingerprint("/a/bin/python|3.11|SSL_BROKEN")

    def test_duplicate_path_keeps_first(self, make_report):
        first = make_report(path="/a/bin/python", score=90)
        second = make_report(path="/a/bin/python", score=10)
        graph = _build([first, second])
        envs = graph.nodes_of_type("venv")
        assert len(envs) == 1
        assert envs[0].score == 90
        assert len(graph.edges_of_type("USES_BASE")) == 1

    def test_case_insensitive_paths_merge(self, make_report):
        options = MapOptions(case_insensitive_paths=True)
        graph = _build(
            [make_report(path="C:\\Envs\\A\\python.exe"), make_report(path="c:\\envs\\a\\python.exe")],
            options=options,
        )
        assert len(graph.nodes_of_type("venv")) == 1

    def test_report_without_facts(self):
        report = EnvironmentReport(python_path="/opt/tool/bin/python")
        graph = _build([report])
        env = graph.nodes_of_type("venv")[0]
        assert env.status == "unknown"
        assert env.score is None
        assert env.python.version is None


class TestBaseNodes:
    """Base grouping and USES_BASE edges."""

    def test_shared_base(self, make_report):
        graph = _build(
            [
                make_report(path="/a/bin/python", base_prefix="/usr"),
                make_report(path="/b/bin/python", base_prefix="/usr"),
            ]
        )
        bases = graph.nodes_of_type("base")
        assert len(bases) == 1
        assert bases[0].id == stable_id("base", "/usr")
        assert bases[0].path == "/usr"
        assert bases[0].fingerprints.python == fingerprint("/usr")
        assert len(graph.children_of(bases[0].id)) == 2

    def test_base_label(self, make_report):
        base = _build([make_report(base_prefix="/usr")]).nodes_of_type("base")[0]
        assert base.label == "Base: 3.11 x86_64 • /usr"

    def test_base_label_without_facts(self):
        base = _build([EnvironmentReport(python_path="/x/python")]).nodes_of_type("base")[0]
        assert base.label == "Base: py? • /x/python"

    def test_base_key_falls_back_to_prefix(self):
        report = EnvironmentReport(python_path="/a/bin/python", facts=Facts(prefix="/opt/py"))
        assert _build([report]).nodes_of_type("base")[0].path == "/opt/py"

    def test_base_key_falls_back_to_path(self):
        report = EnvironmentReport(python_path="/a/bin/python", facts=Facts())
        assert _build([report]).nodes_of_type("base")[0].path == "/a/bin/python"

    def test_uses_base_edge(self, make_report):
        graph = _build([make_report(path="/a/bin/python", codes=("SSL_BROKEN",))])
        base = graph.nodes_of_type("base")[0]
        env = graph.nodes_of_type("venv")[0]
        edge = graph.edges_of_type("USES_BASE")[0]
        assert edge.id == stable_id("e", f"{base.id}->{env.id}")
        assert (edge.source, edge.target) == (base.id, env.id)
        assert edge.weight == 1
        assert edge.meta["dominantIssue"] == "SSL_BROKEN"


class TestFiltering:
    """Reports dropped by the filter create no nodes."""

    def test_min_score(self, make_report):
        options = MapOptions(report_filter=ReportFilter(min_score=50))
        graph = _build(
            [make_report(path="/a/bin/python", score=90), make_report(path="/b/bin/python", score=40)],
            options=options,
        )
        assert graph.summary.env_count == 1

    def test_missing_score_counts_as_zero(self):
        options = MapOptions(report_filter=ReportFilter(min_score=1))
        graph = _build([EnvironmentReport(python_path="/a")], options=options)
        assert graph.summary.env_count == 0

    def test_codes_or_semantics(self, make_report):
        options = MapOptions(report_filter=ReportFilter(codes=("SSL_BROKEN", "DLL_LOAD_FAIL")))
        graph = _build(
            [
                make_report(path="/a/bin/python", codes=("SSL_BROKEN",)),
                make_report(path="/b/bin/python", codes=("DLL_LOAD_FAIL",)),
                make_report(path="/c/bin/python", codes=("PIP_MISSING",)),
            ],
            options=options,
        )
        assert [n.path for n in graph.nodes_of_type("venv")] == ["/a/bin/python", "/b/bin/python"]

    def test_paths_under(self, make_report):
        options = MapOptions(report_filter=ReportFilter(paths_under="/work/"))
        graph = _build(
            [make_report(path="/work/a/bin/python"), make_report(path="/home/b/bin/python")],
            options=options,
        )
        assert [n.path for n in graph.nodes_of_type("venv")] == ["/work/a/bin/python"]

    def test_filtered_out_everything(self, make_report):
        options = MapOptions(report_filter=ReportFilter(min_score=100))
        graph = _build([make_report(score=10)], options=options)
        assert graph.nodes == []
        assert graph.edges == []


class TestDeterminism:
    """Ids and order depend only on inputs."""

    def test_same_inputs_same_graph(self, make_report, make_run):
        reports = [
            make_report(path="/a/bin/python", codes=("SSL_BROKEN",)),
            make_report(path="/b/bin/python", base_prefix="/opt/py"),
        ]
        runs = [make_run(run_id="1", path="/a/bin/python", ok=False), make_run(run_id="2", path="/c/bin/python")]
        g1 = _build(reports, runs)
        g2 = _build(reports, runs)
        assert [n.id for n in g1.nodes] == [n.id for n in g2.nodes]
        assert [e.id for e in g1.edges] == [e.id for e in g2.edges]
        assert g1.summary == g2.summary

    def test_generated_at_is_injectable(self, make_report, fixed_time, fixed_host):
        graph = _build([make_report()], fixed_time=fixed_time, fixed_host=fixed_host)
        assert graph.generated_at == fixed_time
        assert graph.host == fixed_host

    def test_generated_at_defaults_to_now(self, make_report):
        graph = _build([make_report()])
        assert graph.generated_at.endswith("Z")
        assert graph.host is not None


class TestMalformedOptionalFields:
    """Wrong-typed optional fields degrade instead of failing the build."""

    def test_numeric_facts_and_timestamp(self):
        reports = [
            EnvironmentReport.from_dict(
                {
                    "pythonPath": "/a/bin/python",
                    "score": 80,
                    "ranAt": 5,
                    "facts": {"version": 3.11, "base_prefix": 42, "prefix": "/a"},
                }
            ),
            EnvironmentReport.from_dict(
                {"pythonPath": "/b/bin/python", "score": 60, "ranAt": "2026-01-02T00:00:00Z"}
            ),
        ]
        graph = _build(reports)
        a = graph.nodes_of_type("venv")[0]
        assert a.python.version is None
        assert a.last_seen_at is None
        bases = graph.nodes_of_type("base")
        assert [base.id for base in bases] == [
            stable_id("base", "/a"),
            stable_id("base", "/b/bin/python"),
        ]
        assert bases[1].last_seen_at == "2026-01-02T00:00:00Z"


class TestEnvLabel:
    """Interpreter file and script directory are not part of the label."""

    def test_posix_venv(self):
        assert env_label("/home/u/proj/.venv/bin/python3.11") == "proj/.venv"

    def test_windows_scripts(self):
        assert env_label("C:\\work\\api\\.venv\\Scripts\\python.exe") == "api/.venv"

    def test_bare_interpreter(self):
        assert env_label("python") == "python"
