# -*- coding: utf-8 -*-

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
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .grammar import (START_RULE, Alternation, GrammarStore, MalformedProduction, Production,
                      Repetition, Sequence, Terminal, recursive_ids)

EMPTY: FrozenSet[int] = frozenset()


class MatchEngine:
    """
    Decides derivability of strings from a frozen grammar.

    For a rule and a start position the engine computes the set of all end
    positions of valid derivations instead of a single (greedy) match. The
    decision whether a derivation is good enough is left to the caller, so
    ambiguous and self-referential rules never commit to a wrong split.

    Results are memoized per (rule id, start position) for the current input
    string; the memo is dropped when a different string is evaluated.
    One engine must not be used from several threads at once; the grammar
    store itself can be shared.
    """

    def __init__(self, store: GrammarStore, start_rule: int = START_RULE):
        if store.isFrozen():
            store.validate(start_rule)
        else:
            store.freeze(start_rule)
        self.store = store
        self.start_rule = start_rule
        self.recursive_ids = recursive_ids(store)

        self.text: Optional[str] = None
        self.n = 0
        # memo for rule calls: (rule_id, pos) -> end positions
        self.memo: Dict[Tuple[int, int], FrozenSet[int]] = {}
        # rule calls being computed, innermost last
        self.call_stack: List[Tuple[int, int]] = []
        self.in_progress: Set[Tuple[int, int]] = set()
        # left recursion: calls re-entered while in progress, their current
        # partial results, and the calls that read such a partial result
        self.heads: Set[Tuple[int, int]] = set()
        self.seeds: Dict[Tuple[int, int], FrozenSet[int]] = {}
        self.involved: Set[Tuple[int, int]] = set()
        self.hits = 0
        self.misses = 0

    def reset(self, text: str) -> None:
        self.text = text
        self.n = len(text)
        self.memo = {}
        self.call_stack = []
        self.in_progress = set()
        self.heads = set()
        self.seeds = {}
        self.involved = set()
        self.hits = 0
        self.misses = 0
        self._prefill()

    def cache_info(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "entries": len(self.memo)}

    def derivable(self, rule_id: int, text: str, start: int = 0) -> FrozenSet[int]:
        """
        Returns all positions at which a derivation of rule_id that begins at
        start can end. An empty set means no derivation begins there; a start
        outside of the text is not an error.
        """
        if text != self.text:
            self.reset(text)
        if start < 0:
            return EMPTY
        return self._derive(rule_id, start)

    def fully_matches(self, text: str) -> bool:
        return len(text) in self.derivable(self.start_rule, text, 0)

    def _prefill(self) -> None:
        # Every production consumes at least one character, so a rule at pos
        # only depends on rules at pos itself or later positions. With the
        # self-referential rules cached for all later positions, a query
        # recurses at most once through every rule.
        for pos in range(self.n - 1, 0, -1):
            for rule_id in self.recursive_ids:
                self._derive(rule_id, pos)

    def _derive(self, rule_id: int, pos: int) -> FrozenSet[int]:
        production = self.store.resolve(rule_id)
        if pos >= self.n:
            return EMPTY

        key = (rule_id, pos)
        res = self.memo.get(key)
        if res is not None:
            self.hits += 1
            return res

        # the rule refers to itself without consuming anything
        if key in self.in_progress:
            self.heads.add(key)
            idx = self.call_stack.index(key)
            self.involved.update(self.call_stack[idx + 1:])
            return self.seeds.get(key, EMPTY)

        self.misses += 1
        self.call_stack.append(key)
        self.in_progress.add(key)
        try:
            res = self._derive_production(production, pos)
            if key in self.heads:
                # grow the partial result until it stops changing
                while True:
                    self.seeds[key] = res
                    grown = res | self._derive_production(production, pos)
                    if grown == res:
                        break
                    res = grown
        finally:
            self.call_stack.pop()
            self.in_progress.discard(key)
            self.heads.discard(key)
            self.seeds.pop(key, None)

        # results built on a partial result of an enclosing call are not final
        if key in self.involved:
            self.involved.discard(key)
        else:
            self.memo[key] = res
        return res

    def _derive_production(self, production: Production, pos: int) -> FrozenSet[int]:
        if isinstance(production, Terminal):
            if self.text.startswith(production.symbol, pos):
                return frozenset((pos + len(production.symbol),))
            return EMPTY

        if isinstance(production, Sequence):
            return self._derive_sequence(production.ids, (pos,))

        if isinstance(production, Alternation):
            # both branches are always explored
            return (self._derive_sequence(production.first.ids, (pos,)) |
                    self._derive_sequence(production.second.ids, (pos,)))

        if isinstance(production, Repetition):
            return self._derive_repetition(production.rule_id, pos)

        raise MalformedProduction(f"Unknown production type: {type(production).__name__}")

    def _derive_sequence(self, rule_ids: Tuple[int, ...], starts: Iterable[int]) -> FrozenSet[int]:
        positions = frozenset(starts)
        for rule_id in rule_ids:
            ends: Set[int] = set()
            for p in positions:
                ends |= self._derive(rule_id, p)
            if not ends:
                return EMPTY
            positions = frozenset(ends)
        return positions

    def _derive_repetition(self, rule_id: int, pos: int) -> FrozenSet[int]:
        result: Set[int] = set()
        frontier = set(self._derive(rule_id, pos))
        while frontier:
            result |= frontier
            ends: Set[int] = set()
            for p in frontier:
                ends |= self._derive(rule_id, p)
            # positions already in result were expanded before
            frontier = ends - result
        return frozenset(result)
