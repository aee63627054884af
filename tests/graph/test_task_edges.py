"""Tests for task nodes and task-to-environment edges."""

from envmap.config import MapOptions
from envmap.graph import build_graph
from envmap.identity import stable_id
from envmap.tasks import cluster_runs, signature_for_run


class TestTaskModes:
    """Which task nodes each mode draws."""

    def test_none_mode(self, make_report, make_run):
        graph = build_graph([make_report()], [make_run()], options=MapOptions(task_mode="none"))
        assert graph.nodes_of_type("task") == []
        assert graph.summary.runs_passed == 0

    def test_no_runs(self, make_report):
        graph = build_graph([make_report()])
        assert graph.nodes_of_type("task") == []

    def test_totals_count_all_runs(self, make_report, make_runs, per_run_options):
        runs = make_runs(3, 2, path="/home/u/proj/.venv/bin/python")
        for options in (MapOptions(), per_run_options):
            graph = build_graph([make_report()], runs, options=options)
            assert graph.summary.runs_passed == 3
            assert graph.summary.runs_failed == 2


class TestPerRunMode:
    """One task node per run."""

    def test_node_per_run(self, make_report, make_run, per_run_options):
        runs = [make_run(run_id="1"), make_run(run_id="2", ok=False, error_class="ImportError")]
        graph = build_graph([make_report()], runs, options=per_run_options)
        tasks = graph.nodes_of_type("task")
        assert [t.id for t in tasks] == [stable_id("task", "1"), stable_id("task", "2")]
        assert (tasks[0].status, tasks[0].score) == ("good", 100)
        assert (tasks[1].status, tasks[1].score) == ("bad", 40)
        assert tasks[1].health.issues[0].code == "ImportError"

    def test_id_without_run_id(self, make_run, per_run_options):
        run = make_run(run_id="", name="t", command="c", at="2026-01-01T00:00:00Z", path="/p")
        graph = build_graph([], [run], options=per_run_options)
        assert graph.nodes_of_type("task")[0].id == stable_id("task", "t|c|2026-01-01T00:00:00Z|/p")

    def test_failed_run_edge_prefers_probe_issue(self, make_report, make_run, per_run_options):
        run = make_run(ok=False, error_class="ImportError", dominant_issue="SSL_BROKEN")
        graph = build_graph([make_report()], [run], options=per_run_options)
        fail = graph.edges_of_type("FAILED_RUN")[0]
        assert fail.label == "\U0001f512 SSL_BROKEN"
        assert fail.weight == 1
        assert fail.meta["dominantIssue"] == "SSL_BROKEN"

    def test_route_edge(self, make_report, make_run, per_run_options):
        graph = build_graph([make_report()], [make_run()], options=per_run_options)
        task = graph.nodes_of_type("task")[0]
        env = graph.nodes_of_type("venv")[0]
        route = graph.edges_of_type("ROUTES_TASK_TO")[0]
        assert route.id == stable_id("e", f"{task.id}->{env.id}:route")
        assert (route.source, route.target, route.weight) == (task.id, env.id, 1)
        assert graph.edges_of_type("FAILED_RUN") == []

    def test_packages_feature(self, make_run, per_run_options):
        run = make_run(packages=("numpy", "pandas", "scipy", "torch"))
        task = build_graph([], [run], options=per_run_options).nodes_of_type("task")[0]
        assert task.features == ("pkgs:numpy,pandas,scipy",)

    def test_synthesized_env_uses_selected_status(self, make_run, per_run_options):
        run = make_run(path="/ghost/bin/python", selected_status="warn", selected_score=61)
        graph = build_graph([], [run], options=per_run_options)
        env = graph.nodes_of_type("venv")[0]
        assert (env.status, env.score) == ("warn", 61)


class TestClusteredMode:
    """One task node per signature, weighted edges."""

    def test_cluster_node(self, make_report, make_runs):
        runs = make_runs(6, 4, path="/home/u/proj/.venv/bin/python")
        graph = build_graph([make_report()], runs)
        tasks = graph.nodes_of_type("task")
        assert len(tasks) == 1
        task = tasks[0]
        assert task.id == f"task:{signature_for_run(runs[0]).sig_id}"
        assert task.status == "warn"
        assert task.score == 60
        assert "flaky:true" in task.features
        assert task.health.issues[0].code == "ImportError"

    def test_cluster_status(self, make_runs):
        good = build_graph([], make_runs(3, 0, name="good")).nodes_of_type("task")[0]
        bad = build_graph([], make_runs(0, 3, name="bad")).nodes_of_type("task")[0]
        assert (good.status, good.score) == ("good", 100)
        assert (bad.status, bad.score) == ("bad", 0)

    def test_weighted_edges(self, make_report, make_runs):
        path = "/home/u/proj/.venv/bin/python"
        graph = build_graph([make_report(path=path)], make_runs(3, 2, path=path))
        route = graph.edges_of_type("ROUTES_TASK_TO")[0]
        fail = graph.edges_of_type("FAILED_RUN")[0]
        assert (route.label, route.weight) == ("x5", 5)
        assert fail.weight == 2
        assert fail.label.endswith("ImportError x2")
        assert fail.meta["taskSig"] == route.meta["taskSig"]

    def test_no_fail_edge_for_clean_env(self, make_runs):
        runs = make_runs(2, 0, path="/a/bin/python") + make_runs(0, 1, path="/b/bin/python")
        graph = build_graph([], runs)
        assert len(graph.edges_of_type("ROUTES_TASK_TO")) == 2
        fails = graph.edges_of_type("FAILED_RUN")
        assert len(fails) == 1
        assert fails[0].target == stable_id("env", "/b/bin/python")

    def test_path_spellings_fold_into_one_env(self, make_runs):
        runs = make_runs(1, 1, path="C:/Env/python.exe") + make_runs(0, 1, path="c:/env/python.exe")
        graph = build_graph([], runs, options=MapOptions(case_insensitive_paths=True))
        routes = graph.edges_of_type("ROUTES_TASK_TO")
        fails = graph.edges_of_type("FAILED_RUN")
        assert [(e.weight, e.label) for e in routes] == [(3, "x3")]
        assert [e.weight for e in fails] == [2]
        assert len({e.id for e in graph.edges}) == len(graph.edges)
        assert "env-flaky:false" in graph.nodes_of_type("task")[0].features

    def test_precomputed_clusters_fold_by_env(self, make_runs):
        runs = make_runs(0, 1, path="C:/Env/python.exe") + make_runs(0, 1, path="c:/env/python.exe")
        graph = build_graph(
            [],
            runs,
            options=MapOptions(case_insensitive_paths=True),
            clusters=cluster_runs(runs, case_insensitive=False),
        )
        assert [e.weight for e in graph.edges_of_type("ROUTES_TASK_TO")] == [2]
        assert [e.weight for e in graph.edges_of_type("FAILED_RUN")] == [2]
        assert len(graph.nodes_of_type("venv")) == 1


class TestUnknownEnvironment:
    """Runs on unreported paths still resolve."""

    def test_synthesized_env_node(self, make_report, make_run):
        graph = build_graph([make_report(path="/a/bin/python")], [make_run(path="/ghost/bin/python")])
        ghost_id = stable_id("env", "/ghost/bin/python")
        ghost = graph.node_by_id(ghost_id)
        assert ghost is not None
        assert ghost.type == "venv"
        assert ghost.status == "unknown"
        route = graph.edges_of_type("ROUTES_TASK_TO")[0]
        assert route.target == ghost_id
        assert graph.summary.env_count == 2

    def test_synthesized_env_has_no_base(self, make_run):
        graph = build_graph([], [make_run(path="/ghost/bin/python")])
        assert graph.nodes_of_type("base") == []
        assert graph.edges_of_type("USES_BASE") == []

    def test_reported_env_reused(self, make_report, make_run):
        graph = build_graph([make_report(path="/a/bin/python")], [make_run(path="/a/bin/python")])
        assert len(graph.nodes_of_type("venv")) == 1
