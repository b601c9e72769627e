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

import sys
import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict
from datetime import datetime

from .grammar import START_RULE, GrammarStore, MalformedProduction
from .rule_text import RuleParser, build_grammar
from .driver import LOOP_RULE_OVERRIDES, count_matches, split_blocks
from .stats import StatsMap, recordMemoryUsage


def _resolve_path(file_path: str, relative_path_root: str|None = None) -> str:
    p = Path(file_path)
    if p.is_absolute():
        return str(p)
    # Relative path
    if relative_path_root is None:
        return str(p.resolve())
    return str(Path(relative_path_root) / p)

def createLogDir(log_dir, path_suffix):
    now = datetime.now() # current date and time

    date_dir = now.strftime("%Y-%m-%d")
    time_dir = now.strftime("%H-%M-%S")

    subdir_path = '{}/{}/{}-{}'.format(log_dir, date_dir, time_dir, path_suffix)
    os.makedirs(subdir_path, exist_ok=True)
    return subdir_path

def _load_json_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File does not exist: {path}")
    text = p.read_text(encoding="utf-8")
    data = json.loads(text) if text.strip() else {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a JSON object: {path}")
    return data

def _parse_override(text: str) -> tuple[str, str]:
    idx = text.find(':')
    if idx < 0:
        raise MalformedProduction(f'Override must have the form <id>: <definition>, got {text!r}')
    return text[0:idx].strip(), text[idx+1:]

def _pick(cmdline_value, config: Dict[str, Any], key: str, default):
    # command line wins over the config file
    if cmdline_value is not None:
        return cmdline_value
    return config.get(key, default)

def _load_grammar(grammar_lines: list[str], overrides: Dict[Any, str], start_rule: int) -> GrammarStore:
    rules = RuleParser('\n'.join(grammar_lines)).parse()
    return build_grammar(rules, overrides, start_rule)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="rule_match",
        description="Count the strings of a corpus that are fully derivable from the start rule of a numbered grammar.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Input file: grammar rules, a blank line, then one candidate string per line",
    )
    parser.add_argument(
        "--config",
        help="Config .json file (keys: input, loop_rules, overrides, start_rule, stats_out, log_dir, verbose)",
    )
    parser.add_argument(
        "--loop-rules",
        action="store_true",
        default=None,
        help="Replace rules 8 and 11 with their self-referential versions",
    )
    parser.add_argument(
        "--override",
        action="append",
        metavar="'ID: DEFINITION'",
        help="Redefine a rule after loading, may be repeated",
    )
    parser.add_argument("--start-rule", type=int, help=f"Start rule id (default: {START_RULE})")
    parser.add_argument("--stats-out", help="Write matching statistics to this .json file")
    parser.add_argument("--log-dir", help="Store statistics in a new <log-dir>/<date>/<time>-<input> directory")
    parser.add_argument("--verbose", action="store_true", default=None, help="Print progress and per-string results")
    args = parser.parse_args(argv)

    try:
        config: Dict[str, Any] = {}
        config_dir_path = None
        if args.config is not None:
            config_abs_path = _resolve_path(args.config)
            config_dir_path = str(Path(config_abs_path).parent)
            config = _load_json_file(config_abs_path)

        verbose = bool(_pick(args.verbose, config, 'verbose', False))
        loop_rules = bool(_pick(args.loop_rules, config, 'loop_rules', False))
        start_rule = int(_pick(args.start_rule, config, 'start_rule', START_RULE))

        if args.input is not None:
            input_path = _resolve_path(args.input)
        elif 'input' in config:
            input_path = _resolve_path(config['input'], config_dir_path)
        else:
            print('No input file given (command line or config "input")', file=sys.stderr)
            return 2

        stats_out = args.stats_out
        if stats_out is None and 'stats_out' in config:
            stats_out = _resolve_path(config['stats_out'], config_dir_path)
        log_dir = args.log_dir
        if log_dir is None and 'log_dir' in config:
            log_dir = _resolve_path(config['log_dir'], config_dir_path)

        overrides: Dict[Any, str] = {}
        if loop_rules:
            overrides.update(LOOP_RULE_OVERRIDES)
        config_overrides = config.get('overrides', {})
        if not isinstance(config_overrides, dict):
            raise ValueError('Config "overrides" must be a JSON object')
        for rule_id, definition in config_overrides.items():
            overrides[rule_id] = definition
        for text in args.override or []:
            rule_id, definition = _parse_override(text)
            overrides[rule_id] = definition

        if verbose:
            print('Reading input:')
            print(f'  abs: {input_path}')

        p = Path(input_path)
        if not p.exists():
            raise FileNotFoundError(f"File does not exist: {input_path}")
        grammar_lines, corpus = split_blocks(p.read_text(encoding="utf-8"))

        if verbose:
            print(f'Loaded {len(grammar_lines)} rules and {len(corpus)} strings')
            if overrides:
                print('Overridden rules:')
                for rule_id, definition in overrides.items():
                    print(f'  {rule_id}: {definition.strip()}')

        store = _load_grammar(grammar_lines, overrides, start_rule)
    except (LookupError, ValueError, TypeError, OSError) as e:
        # ValueError covers MalformedProduction, bad JSON and undecodable input
        print(str(e), file=sys.stderr)
        return 2

    stats = StatsMap()
    stats.setValueObj('run.input', input_path)
    stats.setValueObj('run.loop_rules', loop_rules)
    stats.setValueObj('run.start_rule', start_rule)

    count = count_matches(store, corpus, start_rule, stats, verbose)

    recordMemoryUsage(stats, verbose)
    if verbose:
        print(f'Matching time: {stats.getValue("matching.total_time"):.3f} s')
    try:
        if stats_out is not None:
            if verbose:
                print(f'Saving statistics to {stats_out}')
            stats.write(stats_out)
        if log_dir is not None:
            out_dir = createLogDir(log_dir, Path(input_path).stem)
            if verbose:
                print(f'Saving statistics to {out_dir}')
            stats.write(f'{out_dir}/stats.json')
    except OSError as e:
        print(str(e), file=sys.stderr)
        return 2

    print(count)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
