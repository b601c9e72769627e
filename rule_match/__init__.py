from .grammar import (START_RULE, MalformedProduction, Production, Terminal, Sequence,  # noqa: F401
	Alternation, Repetition, GrammarStore)
from .rule_text import RuleParser, parse_definition, build_grammar, load_grammar  # noqa: F401
from .engine import MatchEngine  # noqa: F401
from .driver import LOOP_RULE_OVERRIDES, count_matches, match_corpus, split_blocks  # noqa: F401
