# Copyright (c) 2026 Dawid Seredyński

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


from __future__ import annotations

import json
import argparse
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence
import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .stats import StatsMap

STATS_FILE_NAME = 'stats.json'


def load_jsons_one_level(root_dir: str | Path, filename: str, encoding: str = "utf-8"
                         ) -> Dict[Path, dict[str, Any]]:
    """
    Reads json file in each subdirectory of root_dir (and in root_dir itself)
    Returns: {file_path: json_data}
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise NotADirectoryError(root)

    out: Dict[Path, dict[str, Any]] = {}

    for subdir in sorted([root] + list(root.iterdir())):
        if not subdir.is_dir():
            continue

        json_path = subdir / filename
        if not json_path.is_file():
            continue

        with json_path.open("r", encoding=encoding) as f:
            out[json_path] = json.load(f)

    return out


def run_label(sm: StatsMap) -> str:
    run = sm.toJson().get('run', {})
    name = Path(str(run.get('input', '?'))).name
    if run.get('loop_rules', False):
        name += ' (loop)'
    return name


def group_runs(runs: Mapping[Path, dict[str, Any]]) -> Dict[str, list[StatsMap]]:
    groups: Dict[str, list[StatsMap]] = {}
    for json_path, data in runs.items():
        sm = StatsMap.fromJson(data)
        groups.setdefault(run_label(sm), []).append(sm)
    return groups


def summarize_group(runs: Sequence[StatsMap]) -> dict[str, float]:
    times = np.asarray([sm.getValue('matching.total_time') for sm in runs], dtype=float)
    matched = np.asarray([sm.getValue('corpus.matched') for sm in runs], dtype=float)
    count = np.asarray([sm.getValue('corpus.count') for sm in runs], dtype=float)
    return {
        'runs': len(runs),
        'mean_time': float(np.mean(times)) if times.size > 0 else 0.0,
        'median_time': float(np.median(times)) if times.size > 0 else 0.0,
        'max_time': float(np.max(times)) if times.size > 0 else 0.0,
        # all runs of one input should agree; min shows a disagreement
        'matched': float(np.min(matched)) if matched.size > 0 else 0.0,
        'count': float(np.max(count)) if count.size > 0 else 0.0,
    }


def plot_times(groups: Mapping[str, Sequence[StatsMap]], title: Optional[str] = None) -> plt.Axes:
    names = sorted(groups.keys())
    arrays = [np.asarray([sm.getValue('matching.total_time') for sm in groups[n]], dtype=float)
              for n in names]

    if len(arrays) == 0:
        raise ValueError("No runs to plot.")

    _, ax = plt.subplots(figsize=(max(3, 1.5*len(names)), 3))

    positions = np.arange(1, len(names) + 1)
    ax.boxplot(arrays, positions=positions)

    # Sample points
    rng = np.random.default_rng(0)
    for x, arr in zip(positions, arrays):
        xj = x + rng.uniform(-0.08, 0.08, size=arr.size)
        ax.scatter(xj, arr, s=18.0)

    ax.set_xticks(positions)
    ax.set_xticklabels(names)
    ax.set_ylabel("time [s]")
    if title:
        ax.set_title(title)
    ax.grid(True, axis="y", linestyle="--", linewidth=0.5, alpha=0.5)
    return ax


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="summarize_runs",
        description="Summarize statistics of rule_match runs stored in a log directory.",
    )
    parser.add_argument(
        "runs_dir",
        help=f"Directory with one subdirectory per run, each holding {STATS_FILE_NAME}",
    )
    parser.add_argument("--plot-out", help="Save a box plot of matching times (.png or .pdf)")
    args = parser.parse_args(argv)

    runs = load_jsons_one_level(args.runs_dir, STATS_FILE_NAME)
    if len(runs) == 0:
        print(f'No {STATS_FILE_NAME} files found in {args.runs_dir}')
        return 1

    groups = group_runs(runs)

    print(f'{"input":<30} {"runs":>5} {"matched":>9} {"mean [s]":>10} {"median [s]":>11} {"max [s]":>9}')
    for name in sorted(groups.keys()):
        s = summarize_group(groups[name])
        matched = f'{int(s["matched"])}/{int(s["count"])}'
        print(f'{name:<30} {s["runs"]:>5} {matched:>9} {s["mean_time"]:>10.4f} '
              f'{s["median_time"]:>11.4f} {s["max_time"]:>9.4f}')

    if args.plot_out is not None:
        plot_times(groups, title="Matching time")
        plt.tight_layout()
        plt.savefig(args.plot_out)
        print(f'Saved plot to {args.plot_out}')

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
