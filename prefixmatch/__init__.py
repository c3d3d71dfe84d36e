from .config import Config
from .counters import Statistic, get_statistics
from .exceptions import (
    BatchMatchError, ConfigurationError, PrefixMatchError, PrefixSourceError,
    ServiceClosedError, ThreadPoolException, UnknownStrategyError,
)
from .loader import load_prefixes
from .matcher import Matcher, MatchStrategy, TrieMatcher, create_matcher
from .service import MatchResult, PrefixMatchService
from .thread_pool import BatchExecutor
from .trie import PrefixTrie, TrieNode
from .version import __version__, version_info


__all__ = (
    "BatchExecutor",
    "BatchMatchError",
    "Config",
    "ConfigurationError",
    "MatchResult",
    "MatchStrategy",
    "Matcher",
    "PrefixMatchError",
    "PrefixMatchService",
    "PrefixSourceError",
    "PrefixTrie",
    "ServiceClosedError",
    "Statistic",
    "ThreadPoolException",
    "TrieMatcher",
    "TrieNode",
    "UnknownStrategyError",
    "__version__",
    "create_matcher",
    "get_statistics",
    "load_prefixes",
    "version_info",
)
