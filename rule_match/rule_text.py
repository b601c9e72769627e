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
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .grammar import (START_RULE, Alternation, GrammarStore, MalformedProduction, Production,
                      Repetition, Sequence, Terminal)

# A definition can be given as raw text, as pre-split tokens or already parsed
Definition = Union[str, Iterable[str], Production]

DIGITS = "0123456789"


# =========================
# Rule tokenizer
# =========================

@dataclass
class Tok:
    kind: str   # 'NUM', 'STR', 'SYM', 'NL', 'EOF'
    value: str
    pos: int    # position in rule text (char index)

class RuleLexer:
    def __init__(self, text: str):
        self.text = text
        self.n = len(text)
        self.i = 0

    def _peek(self) -> str:
        return self.text[self.i] if self.i < self.n else ""

    def _skip_ws_and_comments(self) -> None:
        while self.i < self.n:
            ch = self._peek()
            # newlines separate rules, they are tokens
            if ch != "\n" and ch.isspace():
                self.i += 1
                continue
            # line comments: #...
            if ch == "#":
                while self.i < self.n and self.text[self.i] != "\n":
                    self.i += 1
                continue
            break

    def location(self, pos: int) -> str:
        line = self.text.count("\n", 0, pos) + 1
        col = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return f"line {line}, col {col}"

    def next(self) -> Tok:
        self._skip_ws_and_comments()
        if self.i >= self.n:
            return Tok("EOF", "", self.i)

        start = self.i
        ch = self._peek()

        if ch == "\n":
            self.i += 1
            return Tok("NL", ch, start)

        if ch in ":|+":
            self.i += 1
            return Tok("SYM", ch, start)

        # terminal: "..." or '...'
        if ch in "\"'":
            quote = ch
            self.i += 1
            buf = []
            while self.i < self.n:
                c = self.text[self.i]
                if c == "\n":
                    break
                if c == "\\" and self.i + 1 < self.n:
                    buf.append(self.text[self.i + 1])
                    self.i += 2
                    continue
                if c == quote:
                    self.i += 1
                    return Tok("STR", "".join(buf), start)
                buf.append(c)
                self.i += 1
            raise MalformedProduction(f"Unterminated terminal starting at {self.location(start)}")

        # rule id
        if ch in DIGITS:
            j = self.i + 1
            while j < self.n and self.text[j] in DIGITS:
                j += 1
            num = self.text[self.i:j]
            self.i = j
            return Tok("NUM", num, start)

        raise MalformedProduction(f"Unexpected character at {self.location(start)}: {ch!r}")


# =========================
# Rule parser
# =========================

class RuleParser:
    """
    rules      := (rule? NL)* rule?
    rule       := NUM ':' definition
    definition := STR | NUM '+' | sequence ('|' sequence)?
    sequence   := NUM+
    """

    def __init__(self, text: str):
        self.lex = RuleLexer(text)
        self.cur = self.lex.next()

    def _error(self, message: str) -> MalformedProduction:
        return MalformedProduction(f"{message} at {self.lex.location(self.cur.pos)}")

    def _eat(self, kind: str, value: Optional[str] = None) -> Tok:
        if self.cur.kind != kind or (value is not None and self.cur.value != value):
            exp = f"{kind}" + (f"({value})" if value else "")
            got = f"{self.cur.kind}({self.cur.value!r})"
            raise self._error(f"Expected {exp}, got {got}")
        t = self.cur
        self.cur = self.lex.next()
        return t

    def _accept(self, kind: str, value: Optional[str] = None) -> Optional[Tok]:
        if self.cur.kind == kind and (value is None or self.cur.value == value):
            return self._eat(kind, value)
        return None

    def _at_end_of_rule(self) -> bool:
        return self.cur.kind in ("NL", "EOF")

    def parse(self) -> Dict[int, Production]:
        rules: Dict[int, Production] = {}
        while self.cur.kind != "EOF":
            if self._accept("NL"):
                continue
            id_tok = self._eat("NUM")
            self._eat("SYM", ":")
            production = self.parse_definition()

            rule_id = int(id_tok.value)
            if rule_id in rules:
                raise MalformedProduction(f"Duplicate rule {rule_id} at {self.lex.location(id_tok.pos)}")
            rules[rule_id] = production

        return rules

    def parse_definition(self) -> Production:
        """Parses one definition, up to and including the end of its line."""
        if self.cur.kind == "STR":
            t = self._eat("STR")
            if t.value == "":
                raise MalformedProduction(f"Empty terminal at {self.lex.location(t.pos)}")
            production = Terminal(t.value)
        else:
            first = self._parse_sequence()
            if self._accept("SYM", "+"):
                if len(first.ids) != 1:
                    raise self._error("Repetition needs exactly one rule id")
                production = Repetition(first.ids[0])
            elif self._accept("SYM", "|"):
                second = self._parse_sequence()
                if self.cur.kind == "SYM" and self.cur.value == "|":
                    raise self._error("Only two alternatives are supported")
                production = Alternation(first, second)
            else:
                production = first

        if not self._at_end_of_rule():
            raise self._error(f"Unexpected {self.cur.kind}({self.cur.value!r})")
        self._accept("NL")
        return production

    def _parse_sequence(self) -> Sequence:
        ids: List[int] = []
        while self.cur.kind == "NUM":
            ids.append(int(self._eat("NUM").value))
        if len(ids) == 0:
            raise self._error(f"Expected rule id, got {self.cur.kind}({self.cur.value!r})")
        return Sequence(tuple(ids))


def parse_definition(tokens: Definition) -> Production:
    """
    Parses a single definition, given either as text ('42 | 42 8') or as
    pre-split tokens (['42', '|', '42', '8']).
    """
    if isinstance(tokens, Production):
        return tokens
    if isinstance(tokens, str):
        text = tokens
    else:
        text = " ".join(tokens)
    parser = RuleParser(text.strip())
    if parser.cur.kind == "EOF":
        raise MalformedProduction("Empty definition")
    production = parser.parse_definition()
    if parser.cur.kind != "EOF":
        raise MalformedProduction(f"Definition spans several lines: {text!r}")
    return production


def _rule_id_of(key) -> int:
    # JSON config files give rule ids as strings
    try:
        return int(key)
    except (TypeError, ValueError):
        raise MalformedProduction(f"Invalid rule id: {key!r}") from None


def build_grammar(definitions: Mapping[int, Definition],
                  overrides: Optional[Mapping[int, Definition]] = None,
                  start_rule: int = START_RULE) -> GrammarStore:
    """
    Builds a frozen grammar store from a mapping: rule id -> definition.
    Overrides are applied on top of the base definitions before validation.
    """
    store = GrammarStore()
    for rule_id, definition in definitions.items():
        store.define(_rule_id_of(rule_id), parse_definition(definition))
    if overrides:
        for rule_id, definition in overrides.items():
            store.define(_rule_id_of(rule_id), parse_definition(definition))
    return store.freeze(start_rule)


def load_grammar(text: str, overrides: Optional[Mapping[int, Definition]] = None,
                 start_rule: int = START_RULE) -> GrammarStore:
    rules = RuleParser(text).parse()
    return build_grammar(rules, overrides, start_rule)
