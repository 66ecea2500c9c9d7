import pytest

from worktime_ledger.config import ConfigManager
from worktime_ledger.ledger import persist
from worktime_ledger.worktime_logger import LogResult, WorktimeLogger


@pytest.fixture
def worktime(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"ledger:\n  project_root: {tmp_path.as_posix()}\n"
        "activitywatch:\n  timeout_seconds: 2.5\n",
        encoding="utf-8",
    )
    return WorktimeLogger(ConfigManager(str(path), environ={}), hostname="myhost")


def test_resolve_ledger_path(worktime, tmp_path):
    assert worktime.resolve_ledger_path() == tmp_path / "src" / "data" / "worktime.json"
    assert worktime.resolve_ledger_path(device="Desk Top") == tmp_path / "src" / "data" / "worktime.devices.desk-top.json"
    assert worktime.resolve_ledger_path(device="x", out="other/hours.json") == tmp_path / "other" / "hours.json"


def test_build_collector_uses_config(worktime):
    collector = worktime.build_collector("http://override:5600/")
    assert collector.client.base_url == "http://override:5600"
    assert collector.client.timeout == 2.5
    assert collector.afk_prefix == "aw-watcher-afk_"


def test_backfill_report(worktime):
    path = worktime.layout.canonical_path
    assert worktime.backfill_report(path, "2024-01-05") is None

    persist({"2024-01-02": 1, "2024-01-04": 1}, path)
    assert worktime.backfill_report(path, "2024-01-05") == ["2024-01-03", "2024-01-05"]
    assert worktime.gaps("2024-01-01", "2024-01-02", path) == ["2024-01-01"]


def test_sync_runs_requested_git_steps(worktime, monkeypatch):
    steps = []
    monkeypatch.setattr("worktime_ledger.vcs.commit_ledger", lambda path, message, cwd: steps.append(("commit", path, message)))
    monkeypatch.setattr("worktime_ledger.vcs.pull_rebase", lambda cwd: steps.append(("rebase",)))
    monkeypatch.setattr("worktime_ledger.vcs.push", lambda cwd: steps.append(("push",)))

    result = LogResult("2024-01-02", 6.5, worktime.layout.canonical_path)
    worktime.sync(result)
    assert steps == []

    worktime.sync(result, commit=True, push=True, rebase=True)
    assert steps == [
        ("commit", "src/data/worktime.json", "Log worktime 2024-01-02: 6.5h"),
        ("rebase",),
        ("push",),
    ]


def test_build_collector_after_server_url_set_to_null(worktime):
    worktime.config.set("activitywatch.server_url", None)
    worktime.config.set("activitywatch.window_prefix", None)
    collector = worktime.build_collector()
    assert collector.client.base_url == "http://localhost:5600"
    assert collector.window_prefix == "aw-watcher-window_"
