import pytest

from prefixmatch import (
    Matcher, MatchStrategy, TrieMatcher, UnknownStrategyError, create_matcher,
)
from prefixmatch.matcher import get_strategy


@pytest.mark.parametrize("strategy", [MatchStrategy.trie, "trie", " TRIE "])
def test_create_matcher(strategy):
    matcher = create_matcher(strategy)
    assert isinstance(matcher, TrieMatcher)
    assert isinstance(matcher, Matcher)
    assert not matcher.loaded


@pytest.mark.parametrize("strategy", ["linear", "", None, 1])
def test_unknown_strategy(strategy):
    with pytest.raises(UnknownStrategyError):
        create_matcher(strategy)

    with pytest.raises(ValueError):
        get_strategy(strategy)


def test_strategy_choices():
    assert MatchStrategy.choices() == ("trie",)
    assert MatchStrategy.default() == "trie"


def test_trie_matcher(prefixes):
    matcher = TrieMatcher()
    matcher.load(prefixes)

    assert matcher.loaded
    assert len(matcher) == len(prefixes)
    assert matcher.find_longest_match("truc") == "tru"
    assert matcher.find_longest_match("zebra") is None
    assert matcher.find_longest_match("") is None


@pytest.mark.parametrize("value", [None, 42, b"apple", ["apple"]])
def test_invalid_input(prefixes, value):
    matcher = TrieMatcher()
    matcher.load(prefixes)

    with pytest.raises(ValueError):
        matcher.find_longest_match(value)


def test_not_loaded():
    matcher = TrieMatcher()
    assert len(matcher) == 0

    with pytest.raises(RuntimeError):
        matcher.find_longest_match("apple")


def test_load_once(prefixes):
    matcher = TrieMatcher()
    matcher.load(prefixes)

    with pytest.raises(RuntimeError):
        matcher.load(["zebra"])

    assert matcher.find_longest_match("zebra") is None


def test_load_accepts_generator():
    matcher = TrieMatcher()
    matcher.load(p for p in ("foo", "foobar"))
    assert matcher.find_longest_match("foobarbaz") == "foobar"
