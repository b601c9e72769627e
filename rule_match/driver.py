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

import time
from typing import Iterable, Mapping, Union

from .grammar import START_RULE, GrammarStore
from .engine import MatchEngine
from .rule_text import Definition, build_grammar
from .stats import StatsMap

# Replacement rules turning 8 and 11 into self-referential rules:
# 8 is one or more copies of 42, 11 is n copies of 42 followed by n copies of 31
LOOP_RULE_OVERRIDES = {
    8: '42 | 42 8',
    11: '42 31 | 42 11 31',
}

Rules = Union[GrammarStore, Mapping[int, Definition]]


def split_blocks(text: str) -> tuple[list[str], list[str]]:
    """
    Splits puzzle input into the grammar block and the corpus block.
    The blocks are separated by one or more blank lines. Grammar lines are
    stripped, corpus lines only lose their line ending.
    """
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in text.splitlines():
        line = line.rstrip('\r')
        if line.strip() == '':
            if current:
                blocks.append(current)
                current = []
            continue
        current.append(line)
    if current:
        blocks.append(current)

    if len(blocks) == 0:
        return [], []
    grammar_lines = [line.strip() for line in blocks[0]]
    # candidate strings keep their surrounding whitespace
    corpus_lines = [line for block in blocks[1:] for line in block]
    return grammar_lines, corpus_lines


def _as_store(rules: Rules, start_rule: int) -> GrammarStore:
    if isinstance(rules, GrammarStore):
        return rules
    return build_grammar(rules, start_rule=start_rule)


def match_corpus(rules: Rules, corpus: Iterable[str], start_rule: int = START_RULE,
                 stats: StatsMap|None = None, verbose: bool = False) -> list[bool]:
    store = _as_store(rules, start_rule)
    engine = MatchEngine(store, start_rule)

    results = []
    t_begin = time.time()
    for text in corpus:
        t_string = time.time()
        # each string gets a fresh memo, also when the same string repeats
        engine.reset(text)
        matched = engine.fully_matches(text)
        results.append(matched)
        if verbose:
            print(f'  {"match   " if matched else "no match"} {text}')

        if stats is not None:
            info = engine.cache_info()
            stats.increaseValue('corpus.count', 1)
            stats.increaseValue('corpus.matched', 1 if matched else 0)
            stats.increaseValue('cache.hits', info['hits'])
            stats.increaseValue('cache.misses', info['misses'])
            stats.maxValue('cache.max_entries', info['entries'])
            stats.maxValue('matching.max_string_time', time.time() - t_string)

    if stats is not None:
        stats.setValue('grammar.rules', len(store))
        stats.increaseValue('matching.total_time', time.time() - t_begin)
    return results


def count_matches(rules: Rules, corpus: Iterable[str], start_rule: int = START_RULE,
                  stats: StatsMap|None = None, verbose: bool = False) -> int:
    return sum(1 for matched in match_corpus(rules, corpus, start_rule, stats, verbose) if matched)
