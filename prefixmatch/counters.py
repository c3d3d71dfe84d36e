import threading
from collections import Counter
from typing import (
    Any, Dict, FrozenSet, Iterator, MutableMapping, MutableSet, NamedTuple,
    Optional, Set, Tuple, Type, Union,
)
from weakref import WeakSet


Number = Union[int, float]


class Metric:
    """ Single named counter, safe to update from worker threads """

    __slots__ = ("name", "counter", "lock")

    def __init__(
        self, name: str, counter: MutableMapping[str, Number],
        lock: threading.Lock, default: Number = 0,
    ):
        self.name = name
        self.counter = counter
        self.lock = lock
        self.counter[name] = default

    @property
    def value(self) -> Number:
        return self.counter[self.name]

    def __iadd__(self, value: Number) -> "Metric":
        with self.lock:
            self.counter[self.name] += value
        return self

    def __isub__(self, value: Number) -> "Metric":
        with self.lock:
            self.counter[self.name] -= value
        return self

    def __eq__(self, other: Any) -> bool:
        return self.counter[self.name] == other

    def __hash__(self) -> int:
        return hash(self.counter[self.name])

    def __repr__(self) -> str:
        return "<Metric %s=%r>" % (self.name, self.value)


CLASS_STORE: Set[Type["Statistic"]] = set()


class MetaStatistic(type):
    """ Collects ``int`` and ``float`` annotations as metric names """

    def __new__(
        mcs, name: str, bases: Tuple[type, ...], dct: Dict[str, Any],
    ) -> Any:
        klass = super().__new__(mcs, name, bases, dct)

        metrics = set()
        for base in reversed(klass.__mro__):
            for prop, kind in getattr(base, "__annotations__", {}).items():
                if kind in (int, float, "int", "float") and prop[0] != "_":
                    metrics.add(prop)

        klass.__metrics__ = frozenset(metrics)     # type: ignore

        if metrics:
            klass.__instances__ = WeakSet()     # type: ignore
            CLASS_STORE.add(klass)     # type: ignore

        return klass


class Statistic(metaclass=MetaStatistic):
    __metrics__: FrozenSet[str]
    __instances__: MutableSet["Statistic"]

    def __init__(self, name: Optional[str] = None) -> None:
        self._counter: MutableMapping[str, Number] = Counter()
        self._lock = threading.Lock()
        self.name = name

        for prop in self.__metrics__:
            setattr(self, prop, Metric(prop, self._counter, self._lock))

        self.__instances__.add(self)

    def as_dict(self) -> Dict[str, Number]:
        with self._lock:
            return dict(self._counter)


class StatisticResult(NamedTuple):
    kind: Type[Statistic]
    name: Optional[str]
    metric: str
    value: Number


def get_statistics(*kind: Type[Statistic]) -> Iterator[StatisticResult]:
    for klass in CLASS_STORE:
        if kind and not issubclass(klass, kind):
            continue

        for instance in list(klass.__instances__):
            for metric, value in instance.as_dict().items():
                yield StatisticResult(
                    kind=klass,
                    name=instance.name,
                    metric=metric,
                    value=value,
                )
