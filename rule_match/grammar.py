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
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

START_RULE = 0


class MalformedProduction(ValueError):
    """A rule definition does not have one of the supported production shapes."""


def _check_rule_id(rule_id) -> None:
    # bool is an int subclass, but True/False are never valid rule ids
    if isinstance(rule_id, bool) or not isinstance(rule_id, int) or rule_id < 0:
        raise MalformedProduction(f"Invalid rule id: {rule_id!r}")


# =========================
# Productions
# =========================

@dataclass(frozen=True)
class Production:
    pass

@dataclass(frozen=True)
class Terminal(Production):
    symbol: str

    def __post_init__(self):
        if not isinstance(self.symbol, str) or self.symbol == "":
            raise MalformedProduction(f"Terminal needs a non-empty symbol, got {self.symbol!r}")

@dataclass(frozen=True)
class Sequence(Production):
    ids: Tuple[int, ...]

    def __post_init__(self):
        # accept any iterable of ids, store it as a tuple
        object.__setattr__(self, "ids", tuple(self.ids))
        if len(self.ids) == 0:
            raise MalformedProduction("Sequence needs at least one rule id")
        for rule_id in self.ids:
            _check_rule_id(rule_id)

@dataclass(frozen=True)
class Alternation(Production):
    first: Sequence
    second: Sequence

    def __post_init__(self):
        for branch in (self.first, self.second):
            if not isinstance(branch, Sequence):
                raise MalformedProduction(f"Alternation branch must be a Sequence, got {branch!r}")

@dataclass(frozen=True)
class Repetition(Production):
    rule_id: int

    def __post_init__(self):
        _check_rule_id(self.rule_id)


def referenced_ids(production: Production) -> Tuple[int, ...]:
    """Rule ids the production refers to, in definition order."""
    if isinstance(production, Terminal):
        return ()
    if isinstance(production, Sequence):
        return production.ids
    if isinstance(production, Alternation):
        return production.first.ids + production.second.ids
    if isinstance(production, Repetition):
        return (production.rule_id,)
    raise MalformedProduction(f"Unknown production type: {type(production).__name__}")


def production_to_str(production: Production) -> str:
    if isinstance(production, Terminal):
        return '"{}"'.format(production.symbol.replace("\\", "\\\\").replace('"', '\\"'))
    if isinstance(production, Sequence):
        return " ".join(str(i) for i in production.ids)
    if isinstance(production, Alternation):
        return "{} | {}".format(production_to_str(production.first),
                                production_to_str(production.second))
    if isinstance(production, Repetition):
        return f"{production.rule_id}+"
    raise MalformedProduction(f"Unknown production type: {type(production).__name__}")


# =========================
# Grammar store
# =========================

class GrammarStore:
    """
    Mapping: rule id -> production.

    Rules refer to each other only by id, so self-referential grammars never
    form object cycles; the matcher re-resolves ids on every step.
    The store is filled with define() and then frozen. freeze() checks that
    every referenced id (and the start rule) exists; cycles are allowed.
    """

    def __init__(self):
        self._productions: Dict[int, Production] = {}
        self._frozen = False

    def define(self, rule_id: int, production: Production) -> None:
        if self._frozen:
            raise RuntimeError(f"Cannot define rule {rule_id}: grammar is frozen")
        _check_rule_id(rule_id)
        if not isinstance(production, Production):
            raise MalformedProduction(f"Rule {rule_id}: not a production: {production!r}")
        self._productions[rule_id] = production

    def resolve(self, rule_id: int) -> Production:
        try:
            return self._productions[rule_id]
        except KeyError:
            raise LookupError(f"Undefined rule: {rule_id}") from None

    def validate(self, start_rule: int = START_RULE) -> None:
        if start_rule not in self._productions:
            raise LookupError(f"Start rule {start_rule} is not defined")
        for rule_id, production in self._productions.items():
            for ref in referenced_ids(production):
                if ref not in self._productions:
                    raise LookupError(f"Rule {rule_id} references undefined rule {ref}")

    def freeze(self, start_rule: int = START_RULE) -> GrammarStore:
        self.validate(start_rule)
        self._frozen = True
        return self

    def isFrozen(self) -> bool:
        return self._frozen

    def ids(self) -> list[int]:
        return sorted(self._productions.keys())

    def items(self) -> Iterator[Tuple[int, Production]]:
        for rule_id in self.ids():
            yield rule_id, self._productions[rule_id]

    def __contains__(self, rule_id) -> bool:
        return rule_id in self._productions

    def __len__(self) -> int:
        return len(self._productions)

    def __str__(self) -> str:
        return "\n".join(f"{rule_id}: {production_to_str(p)}" for rule_id, p in self.items())


def recursive_ids(store: GrammarStore) -> list[int]:
    """Rule ids that refer to themselves, directly or through other rules."""
    result = []
    for rule_id in store.ids():
        visited = set()
        stack = list(referenced_ids(store.resolve(rule_id)))
        while stack:
            ref = stack.pop()
            if ref == rule_id:
                result.append(rule_id)
                break
            if ref in visited:
                continue
            visited.add(ref)
            stack.extend(referenced_ids(store.resolve(ref)))
    return result
