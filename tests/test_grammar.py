import pytest

from rule_match.grammar import (Alternation, GrammarStore, MalformedProduction, Repetition, Sequence,
                                Terminal, production_to_str, recursive_ids, referenced_ids)


def _store(**rules):
    store = GrammarStore()
    for name, production in rules.items():
        store.define(int(name[1:]), production)
    return store


@pytest.mark.parametrize("make", [
    lambda: Terminal(""),
    lambda: Sequence(()),
    lambda: Sequence((1, -2)),
    lambda: Sequence((True,)),
    lambda: Sequence(("1",)),
    lambda: Alternation(Sequence((1,)), Terminal("a")),
    lambda: Repetition(-1),
])
def test_impossible_shapes_are_malformed(make):
    with pytest.raises(MalformedProduction):
        make()


def test_sequence_stores_ids_as_tuple():
    assert Sequence([1, 2]) == Sequence((1, 2))
    assert Sequence([1, 2]).ids == (1, 2)


def test_referenced_ids():
    assert referenced_ids(Terminal("a")) == ()
    assert referenced_ids(Sequence((4, 1, 5))) == (4, 1, 5)
    assert referenced_ids(Alternation(Sequence((42,)), Sequence((42, 8)))) == (42, 42, 8)
    assert referenced_ids(Repetition(42)) == (42,)


def test_production_to_str():
    assert production_to_str(Terminal("a")) == '"a"'
    assert production_to_str(Terminal('"')) == '"\\""'
    assert production_to_str(Alternation(Sequence((2, 3)), Sequence((3, 2)))) == "2 3 | 3 2"
    assert production_to_str(Repetition(42)) == "42+"


def test_define_and_resolve():
    store = GrammarStore()
    store.define(0, Sequence((1,)))
    store.define(1, Terminal("a"))
    assert store.resolve(1) == Terminal("a")
    assert 0 in store and 2 not in store
    assert len(store) == 2
    assert store.ids() == [0, 1]

    # overwrite during construction
    store.define(1, Terminal("b"))
    assert store.resolve(1) == Terminal("b")


def test_resolve_missing_rule_raises_lookup_error():
    store = GrammarStore()
    with pytest.raises(LookupError):
        store.resolve(7)


def test_define_rejects_non_productions():
    store = GrammarStore()
    with pytest.raises(MalformedProduction):
        store.define(0, "1 2")


def test_freeze_rejects_undefined_reference():
    store = _store(r0=Sequence((1, 2)), r1=Terminal("a"))
    with pytest.raises(LookupError, match="undefined rule 2"):
        store.freeze()
    assert not store.isFrozen()


def test_freeze_requires_start_rule():
    store = _store(r1=Terminal("a"))
    with pytest.raises(LookupError, match="Start rule 0"):
        store.freeze()
    # a different start rule is fine
    assert store.freeze(start_rule=1).isFrozen()


def test_cycles_are_allowed():
    store = _store(
        r0=Sequence((8,)),
        r8=Alternation(Sequence((42,)), Sequence((42, 8))),
        r42=Terminal("a"),
    )
    assert store.freeze() is store


def test_frozen_store_is_immutable():
    store = _store(r0=Terminal("a")).freeze()
    with pytest.raises(RuntimeError):
        store.define(0, Terminal("b"))
    assert store.resolve(0) == Terminal("a")


def test_str_lists_rules_in_order():
    store = _store(r1=Terminal("a"), r0=Sequence((1, 1)), r2=Repetition(1))
    assert str(store) == '0: 1 1\n1: "a"\n2: 1+'


def test_recursive_ids():
    store = _store(
        r0=Sequence((8, 11)),
        r8=Alternation(Sequence((42,)), Sequence((42, 8))),
        r11=Alternation(Sequence((42, 31)), Sequence((42, 12, 31))),
        r12=Sequence((11,)),
        r13=Repetition(13),
        r42=Terminal("a"),
        r31=Terminal("b"),
    ).freeze()
    assert recursive_ids(store) == [8, 11, 12, 13]
