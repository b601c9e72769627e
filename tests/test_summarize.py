import json

import pytest

from rule_match.stats import StatsMap
from rule_match.summarize import group_runs, load_jsons_one_level, main, summarize_group


def _write_run(root, name, input_path, total_time, matched=2, loop_rules=False):
    run_dir = root / name
    run_dir.mkdir(parents=True)
    data = {
        "run": {"input": input_path, "loop_rules": loop_rules},
        "corpus": {"count": 5, "matched": matched},
        "cache": {"hits": 10, "misses": 20, "max_entries": 15},
        "matching": {"total_time": total_time},
    }
    (run_dir / "stats.json").write_text(json.dumps(data), encoding="utf-8")


def test_stats_map_paths():
    sm = StatsMap()
    sm.increaseValue("cache.hits", 2)
    sm.increaseValue("cache.hits", 3)
    sm.maxValue("cache.max_entries", 4)
    sm.maxValue("cache.max_entries", 1)
    sm.setValue("grammar.rules", 6)
    sm.setValueObj("run.input", "in.txt")
    assert sm.getValue("cache.hits") == 5
    assert sm.getValue("cache.max_entries") == 4
    assert sm.getValue("grammar.rules") == 6
    assert sm.getValue("missing.path") == 0
    assert sm.getKeysAt("cache") == ["hits", "max_entries"]
    assert StatsMap.fromJson(sm.toJson()).toJson()["run"]["input"] == "in.txt"


def test_group_and_summarize(tmp_path):
    _write_run(tmp_path, "r1", "/data/input.txt", 1.0)
    _write_run(tmp_path, "r2", "/data/input.txt", 3.0)
    _write_run(tmp_path, "r3", "/data/input.txt", 2.0, matched=4, loop_rules=True)
    (tmp_path / "not_a_run").mkdir()

    runs = load_jsons_one_level(tmp_path, "stats.json")
    assert len(runs) == 3
    groups = group_runs(runs)
    assert sorted(groups.keys()) == ["input.txt", "input.txt (loop)"]

    s = summarize_group(groups["input.txt"])
    assert set(s) == {"runs", "mean_time", "median_time", "max_time", "matched", "count"}
    assert s["runs"] == 2
    assert s["mean_time"] == pytest.approx(2.0)
    assert s["median_time"] == pytest.approx(2.0)
    assert s["max_time"] == pytest.approx(3.0)
    assert s["matched"] == 2
    assert s["count"] == 5


def test_main_prints_table_and_plot(tmp_path, capsys):
    runs_dir = tmp_path / "runs"
    _write_run(runs_dir, "r1", "/data/input.txt", 0.5)
    _write_run(runs_dir, "r2", "/data/other.txt", 0.25)
    plot_path = tmp_path / "times.png"

    assert main([str(runs_dir), "--plot-out", str(plot_path)]) == 0
    out = capsys.readouterr().out
    assert "input.txt" in out and "other.txt" in out
    assert plot_path.is_file()


def test_main_without_runs(tmp_path, capsys):
    assert main([str(tmp_path)]) == 1


def test_missing_runs_dir(tmp_path):
    with pytest.raises(NotADirectoryError):
        load_jsons_one_level(tmp_path / "nope", "stats.json")
