import logging
import sys
import time
from contextlib import contextmanager

import pytest

from prefixmatch import BatchExecutor, PrefixMatchService, PrefixTrie


EXAMPLE_PREFIXES = (
    "a", "app", "apple", "application", "bat", "batter", "tru", "true", "foo",
)


@pytest.fixture
def timer():
    @contextmanager
    def timer(expected_time=0, *, dispersion=0.5):
        expected_time = float(expected_time)
        dispersion_value = expected_time * dispersion

        now = time.monotonic()

        yield

        delta = time.monotonic() - now

        lower_bound = expected_time - dispersion_value
        upper_bound = expected_time + dispersion_value

        assert lower_bound < delta < upper_bound

    return timer


@pytest.fixture
def prefixes():
    return list(EXAMPLE_PREFIXES)


@pytest.fixture
def trie(prefixes):
    trie = PrefixTrie()
    trie.build(prefixes)
    return trie


@pytest.fixture
def executor():
    pool = BatchExecutor(4, statistic_name="test")
    try:
        yield pool
    finally:
        pool.shutdown(wait=True, timeout=1)


@pytest.fixture
def service(prefixes):
    with PrefixMatchService(prefixes, pool_size=4, shutdown_timeout=1) as svc:
        yield svc


@pytest.fixture
def restore_logging(monkeypatch):
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)

    yield

    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
