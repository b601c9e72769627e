import pytest

# Example from the puzzle description: only ababbb and abbbab match
SAMPLE_GRAMMAR = """\
0: 4 1 5
1: 2 3 | 3 2
2: 4 4 | 5 5
3: 4 5 | 5 4
4: "a"
5: "b"
"""

SAMPLE_CORPUS = ["ababbb", "bababa", "abbbab", "aaabbb", "aaaabbb"]

# Rules 8 and 11 become self-referential with the loop overrides
LOOP_GRAMMAR = """\
0: 8 11
8: 42
11: 42 31
42: "a"
31: "b"
"""

LOOP_CORPUS = ["aab", "aaab", "aaabb", "aabb", "ab"]


@pytest.fixture
def sample_input(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_text(SAMPLE_GRAMMAR + "\n" + "\n".join(SAMPLE_CORPUS) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def loop_input(tmp_path):
    path = tmp_path / "loop.txt"
    path.write_text(LOOP_GRAMMAR + "\n" + "\n".join(LOOP_CORPUS) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def sample_grammar():
    return SAMPLE_GRAMMAR


@pytest.fixture
def sample_corpus():
    return list(SAMPLE_CORPUS)


@pytest.fixture
def loop_grammar():
    return LOOP_GRAMMAR


@pytest.fixture
def loop_corpus():
    return list(LOOP_CORPUS)
