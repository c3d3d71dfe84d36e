import logging
from abc import ABC, abstractmethod
from enum import Enum, unique
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

from .exceptions import UnknownStrategyError
from .trie import PrefixTrie


log = logging.getLogger(__name__)


class Matcher(ABC):
    """
    Longest-prefix matching strategy.

    :meth:`load` is called exactly once before the matcher is shared
    between threads, :meth:`find_longest_match` must be safe to call
    concurrently afterwards. ``None`` is returned when nothing matches.
    """

    @abstractmethod
    def load(self, prefixes: Iterable[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def find_longest_match(self, value: str) -> Optional[str]:
        raise NotImplementedError

    @property
    @abstractmethod
    def loaded(self) -> bool:
        raise NotImplementedError


class TrieMatcher(Matcher):
    __slots__ = ("_trie",)

    def __init__(self) -> None:
        self._trie: Optional[PrefixTrie] = None

    @property
    def loaded(self) -> bool:
        return self._trie is not None

    @property
    def trie(self) -> PrefixTrie:
        if self._trie is None:
            raise RuntimeError("Prefixes are not loaded")
        return self._trie

    def load(self, prefixes: Iterable[str]) -> None:
        if self._trie is not None:
            raise RuntimeError("Prefixes are already loaded")

        # Publish the trie only when it is fully built
        trie = PrefixTrie()
        trie.build(prefixes)
        self._trie = trie

    def find_longest_match(self, value: str) -> Optional[str]:
        if not isinstance(value, str):
            raise ValueError(
                "Input must be a string, not %s" % type(value).__name__,
            )
        return self.trie.find_longest_match(value)

    def __len__(self) -> int:
        return len(self.trie) if self.loaded else 0

    def __repr__(self) -> str:
        return "<%s: %r>" % (self.__class__.__name__, self._trie)


@unique
class MatchStrategy(Enum):
    trie = "trie"

    @classmethod
    def choices(cls) -> Tuple[str, ...]:
        return tuple(cls._member_names_)

    @classmethod
    def default(cls) -> str:
        return cls.trie.name


MATCHERS: Dict[MatchStrategy, Callable[[], Matcher]] = {
    MatchStrategy.trie: TrieMatcher,
}


def get_strategy(strategy: Union[str, MatchStrategy]) -> MatchStrategy:
    if isinstance(strategy, MatchStrategy):
        return strategy

    try:
        return MatchStrategy[strategy.strip().lower()]
    except (AttributeError, KeyError) as e:
        raise UnknownStrategyError(
            "Invalid matching strategy: %r, expected one of %s" % (
                strategy, ", ".join(MatchStrategy.choices()),
            ),
        ) from e


def create_matcher(
    strategy: Union[str, MatchStrategy] = MatchStrategy.trie,
) -> Matcher:
    strategy = get_strategy(strategy)
    log.debug("Creating %s matcher", strategy.name)
    return MATCHERS[strategy]()


__all__ = (
    "MATCHERS",
    "MatchStrategy",
    "Matcher",
    "TrieMatcher",
    "create_matcher",
    "get_strategy",
)
