import logging
from typing import Dict, Iterable, Optional


log = logging.getLogger(__name__)


class TrieNode:
    __slots__ = ("children", "terminal")

    def __init__(self) -> None:
        self.children: Dict[str, TrieNode] = {}
        self.terminal: bool = False

    def __repr__(self) -> str:
        return "<%s: children=%d terminal=%r>" % (
            self.__class__.__name__, len(self.children), self.terminal,
        )


class PrefixTrie:
    """
    Character trie answering longest-prefix queries.

    Only alphanumeric characters may form an edge. Lookups and insertions
    apply the same rule: the first character failing
    :meth:`is_admissible` stops the walk. A prefix containing such a
    character is therefore never registered, because no lookup could
    ever reach it. Matching is case-sensitive.

    The trie is built once and must not be modified while it is read by
    other threads. After :meth:`build` returns any number of threads
    may call :meth:`find_longest_match` without locking.
    """

    root: TrieNode

    __slots__ = ("root", "_size")

    def __init__(self) -> None:
        self.root = TrieNode()
        self._size = 0

    @staticmethod
    def is_admissible(char: str) -> bool:
        return char.isalnum()

    def insert(self, prefix: str) -> bool:
        """
        Registers a single prefix. Returns ``False`` when the prefix
        is empty or contains a character which is not admissible.
        """
        if not prefix:
            log.debug("Skipping empty prefix")
            return False

        node = self.root
        for char in prefix:
            if not self.is_admissible(char):
                log.debug(
                    "Prefix %r truncated at non-alphanumeric character %r, "
                    "skipping", prefix, char,
                )
                return False

            child = node.children.get(char)
            if child is None:
                child = node.children[char] = TrieNode()
            node = child

        if not node.terminal:
            node.terminal = True
            self._size += 1

        return True

    def build(self, prefixes: Iterable[str]) -> int:
        """ Inserts all prefixes and returns how many were accepted """
        accepted = 0
        rejected = 0

        for prefix in prefixes:
            if self.insert(prefix):
                accepted += 1
            else:
                rejected += 1

        if rejected:
            log.warning(
                "%d prefixes were rejected during build, "
                "only alphanumeric prefixes are supported", rejected,
            )

        log.debug(
            "Trie built from %d prefixes, %d distinct registered",
            accepted, self._size,
        )
        return accepted

    def find_longest_match(self, value: str) -> Optional[str]:
        """
        Returns the longest registered prefix of ``value`` or ``None``.

        Single pass over ``value``, stops at the first character which
        has no edge from the current node or is not admissible.
        """
        node = self.root
        longest = 0

        for idx, char in enumerate(value, 1):
            if not self.is_admissible(char):
                break

            child = node.children.get(char)
            if child is None:
                break

            node = child
            if node.terminal:
                longest = idx

        if not longest:
            return None

        return value[:longest]

    def __contains__(self, prefix: object) -> bool:
        if not isinstance(prefix, str) or not prefix:
            return False

        node = self.root
        for char in prefix:
            child = node.children.get(char)
            if child is None:
                return False
            node = child
        return node.terminal

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return "<%s: %d prefixes>" % (self.__class__.__name__, self._size)
