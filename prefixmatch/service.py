import asyncio
import logging
from contextlib import contextmanager
from types import TracebackType
from typing import Dict, Iterable, Iterator, Optional, Sequence, Type, Union

from .config import Config
from .counters import Statistic
from .exceptions import BatchMatchError, PrefixMatchError, ServiceClosedError
from .loader import load_prefixes
from .matcher import Matcher, MatchStrategy, create_matcher
from .thread_pool import BatchExecutor


log = logging.getLogger(__name__)

MatchResult = Dict[str, Optional[str]]


class MatchServiceStatistic(Statistic):
    lookups: int
    batches: int
    matched: int
    missed: int


class PrefixMatchService:
    """
    Longest-prefix matching over a fixed prefix list.

    The matcher is completely built in the constructor before the
    worker pool exists, so every batch reads finished data. Lookups
    return ``None`` when no prefix matches. :meth:`shutdown` must be
    called once when the service is no longer needed, or use the
    service as a context manager.

    >>> with PrefixMatchService(["app", "apple"], pool_size=2) as service:
    ...     service.match("applepie")
    'apple'
    """

    def __init__(
        self, prefixes: Iterable[str],
        strategy: Union[str, MatchStrategy] = MatchStrategy.trie,
        pool_size: Optional[int] = None,
        shutdown_timeout: float = BatchExecutor.SHUTDOWN_TIMEOUT,
    ):
        self._matcher: Matcher = create_matcher(strategy)

        log.debug("Service initializing: loading prefixes into the matcher")
        self._matcher.load(prefixes)

        self._executor = BatchExecutor(pool_size, statistic_name="prefixmatch")
        self._statistic = MatchServiceStatistic()
        self.shutdown_timeout = shutdown_timeout

        log.info(
            "Service initialized with %r and %d workers.",
            self._matcher, self._executor.max_workers,
        )

    @classmethod
    def from_config(
        cls, config: Config, default_prefixes: Sequence[str] = (),
    ) -> "PrefixMatchService":
        if config.prefix_file:
            prefixes = load_prefixes(config.prefix_file)
        else:
            log.info(
                "No prefix file configured, using %d built-in prefixes",
                len(default_prefixes),
            )
            prefixes = list(default_prefixes)

        return cls(
            prefixes,
            strategy=config.strategy,
            pool_size=config.pool_size,
            shutdown_timeout=config.shutdown_timeout,
        )

    @property
    def matcher(self) -> Matcher:
        return self._matcher

    @property
    def executor(self) -> BatchExecutor:
        return self._executor

    @property
    def statistic(self) -> MatchServiceStatistic:
        return self._statistic

    @property
    def closed(self) -> bool:
        return self._executor.is_shutdown

    def match(self, value: str) -> Optional[str]:
        """ Longest prefix of ``value`` or ``None``, runs in caller thread """
        result = self._matcher.find_longest_match(value)

        self._statistic.lookups += 1
        if result is None:
            self._statistic.missed += 1
        else:
            self._statistic.matched += 1

        return result

    def _check_closed(self) -> None:
        if self.closed:
            raise ServiceClosedError("Service is shut down")

    @contextmanager
    def _submitting(self) -> Iterator[None]:
        # shutdown may win the race against a batch already past the check
        try:
            yield
        except PrefixMatchError:
            raise
        except RuntimeError as e:
            if not self.closed:
                raise
            raise ServiceClosedError("Service is shut down") from e

    def match_batch(self, values: Iterable[str]) -> MatchResult:
        """
        Matches every distinct value on the worker pool and blocks
        until the whole batch is done. Raises :class:`BatchMatchError`
        instead of returning partial results.
        """
        self._check_closed()
        self._statistic.batches += 1

        with self._submitting():
            return self._executor.map_batch(self.match, values)

    async def match_batch_async(self, values: Iterable[str]) -> MatchResult:
        """ Same as :meth:`match_batch` but awaits the pool instead """
        self._check_closed()
        self._statistic.batches += 1

        unique = list(dict.fromkeys(values))
        if not unique:
            return {}

        with self._submitting():
            futures = [
                asyncio.wrap_future(self._executor.submit(self.match, value))
                for value in unique
            ]

        try:
            results = await asyncio.gather(*futures)
        except Exception as e:
            for future in futures:
                future.cancel()
            raise BatchMatchError(
                "Batch of %d items failed" % len(unique),
            ) from e

        return dict(zip(unique, results))

    def shutdown(self) -> None:
        if self.closed:
            return

        log.info("Service shutting down the worker pool...")
        self._executor.shutdown(wait=True, timeout=self.shutdown_timeout)
        log.info("Service worker pool has been shut down.")

    def __enter__(self) -> "PrefixMatchService":
        return self

    def __exit__(
        self, exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return "<%s: %r %r>" % (
            self.__class__.__name__, self._matcher, self._executor,
        )


__all__ = ("MatchResult", "MatchServiceStatistic", "PrefixMatchService")
