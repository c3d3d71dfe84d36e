import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from prefixmatch import (
    BatchMatchError, Config, PrefixMatchService, PrefixSourceError,
    ServiceClosedError, UnknownStrategyError,
)


EXPECTED = {
    "application_server": "application",
    "truc": "tru",
    "applx_test": "app",
    "zebra": None,
    "": None,
}


def test_match(service):
    for value, expected in EXPECTED.items():
        assert service.match(value) == expected


def test_match_invalid_input(service):
    with pytest.raises(ValueError):
        service.match(None)


def test_match_batch(service):
    assert service.match_batch(EXPECTED) == EXPECTED


def test_match_batch_set(service):
    assert service.match_batch(set(EXPECTED)) == EXPECTED


def test_match_batch_empty(service):
    assert service.match_batch([]) == {}
    assert service.match_batch(set()) == {}


def test_match_batch_duplicates(service):
    result = service.match_batch(["truc", "truc", "zebra", "truc"])
    assert result == {"truc": "tru", "zebra": None}


def test_match_batch_same_as_single(service):
    values = [
        "a", "ab", "app", "appl", "apple", "applesauce", "applicati",
        "bat", "batt", "batter", "batters", "t", "tr", "tru", "true",
        "fo", "foo", "food", "x", "-a", "a-", "app!e",
    ]
    assert service.match_batch(values) == {
        value: service.match(value) for value in values
    }


def test_match_batch_invalid_input(service):
    with pytest.raises(BatchMatchError) as e:
        service.match_batch(["apple", None])

    assert isinstance(e.value.__cause__, ValueError)


def test_concurrent_reads(service):
    with ThreadPoolExecutor(16) as pool:
        results = list(pool.map(service.match, ["applepie"] * 100))

    assert results == ["apple"] * 100


def test_concurrent_batches(service):
    def batch(_):
        return service.match_batch(EXPECTED)

    with ThreadPoolExecutor(10) as pool:
        results = list(pool.map(batch, range(10)))

    assert results == [EXPECTED] * 10


def test_match_batch_async(service):
    async def main():
        return await service.match_batch_async(list(EXPECTED) + ["truc"])

    assert asyncio.run(main()) == EXPECTED


def test_match_batch_async_empty(service):
    assert asyncio.run(service.match_batch_async([])) == {}


def test_match_batch_async_invalid_input(service):
    with pytest.raises(BatchMatchError):
        asyncio.run(service.match_batch_async(["apple", 42]))


def test_shutdown(prefixes):
    service = PrefixMatchService(prefixes, pool_size=2)
    assert not service.closed

    service.shutdown()
    service.shutdown()

    assert service.closed
    assert service.match("apple") == "apple"

    with pytest.raises(ServiceClosedError):
        service.match_batch(["apple"])

    with pytest.raises(ServiceClosedError):
        asyncio.run(service.match_batch_async(["apple"]))


def test_shutdown_during_batch(prefixes, monkeypatch):
    service = PrefixMatchService(prefixes, pool_size=2)

    # the batch got past the closed check right before shutdown
    monkeypatch.setattr(service, "_check_closed", lambda: None)
    service.shutdown()

    with pytest.raises(ServiceClosedError) as e:
        service.match_batch(["apple", "truest"])
    assert isinstance(e.value.__cause__, RuntimeError)

    with pytest.raises(ServiceClosedError):
        asyncio.run(service.match_batch_async(["apple"]))


def test_context_manager(prefixes):
    with PrefixMatchService(prefixes, pool_size=2) as service:
        assert service.match_batch(["truest"]) == {"truest": "true"}
    assert service.closed


def test_unknown_strategy(prefixes):
    with pytest.raises(UnknownStrategyError):
        PrefixMatchService(prefixes, strategy="aho-corasick")


def test_pool_size(prefixes):
    with PrefixMatchService(prefixes, pool_size=3) as service:
        assert service.executor.max_workers == 3


def test_statistic(prefixes):
    with PrefixMatchService(prefixes, pool_size=2) as service:
        service.match("apple")
        service.match("zebra")
        service.match("truest")
        service.match_batch(["foo", "bar"])

        statistic = service.statistic
        assert statistic.lookups == 5
        assert statistic.matched == 3
        assert statistic.missed == 2
        assert statistic.batches == 1


def test_from_config(tmp_path):
    prefix_file = tmp_path / "prefixes.txt"
    prefix_file.write_text("foo\nfoobar\n\n  bar  \n")

    config = Config(prefix_file=str(prefix_file), pool_size=2)
    with PrefixMatchService.from_config(config) as service:
        assert service.match("foobarbaz") == "foobar"
        assert service.match("bart") == "bar"


def test_from_config_default_prefixes():
    config = Config(pool_size=1)
    with PrefixMatchService.from_config(
        config, default_prefixes=["mobile"],
    ) as service:
        assert service.match("mobileapp") == "mobile"


def test_from_config_missing_file(tmp_path):
    config = Config(prefix_file=str(tmp_path / "missing.txt"))

    with pytest.raises(PrefixSourceError):
        PrefixMatchService.from_config(config)


def test_from_config_unknown_strategy():
    with pytest.raises(UnknownStrategyError):
        PrefixMatchService.from_config(Config(strategy="unknown"))
