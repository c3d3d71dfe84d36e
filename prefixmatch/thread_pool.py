import contextvars
import logging
import threading
import time
from concurrent.futures import (
    FIRST_EXCEPTION, CancelledError, Executor, Future, InvalidStateError, wait,
)
from dataclasses import dataclass, field
from multiprocessing import cpu_count
from queue import Empty, SimpleQueue
from typing import (
    Any, Callable, Dict, FrozenSet, Hashable, Iterable, List, Optional, Set,
    Tuple, TypeVar,
)

from .counters import Statistic
from .exceptions import BatchMatchError, ThreadPoolException


K = TypeVar("K", bound=Hashable)
T = TypeVar("T")
log = logging.getLogger(__name__)


class ThreadPoolStatistic(Statistic):
    threads: int
    submitted: int
    done: int
    success: int
    error: int
    cancelled: int
    sum_time: float


@dataclass(frozen=True)
class WorkItem:
    func: Callable[..., Any]
    future: Future
    statistic: ThreadPoolStatistic
    args: Tuple[Any, ...] = field(default_factory=tuple)
    kwargs: Dict[str, Any] = field(default_factory=dict)
    context: contextvars.Context = field(
        default_factory=contextvars.copy_context,
    )

    def __call__(self) -> None:
        if self.future.done():
            return

        try:
            if not self.future.set_running_or_notify_cancel():
                self.statistic.cancelled += 1
                return
        except RuntimeError:
            # resolved by a forced shutdown right before the start
            return

        result, exception = None, None
        delta = -time.monotonic()
        try:
            result = self.context.run(self.func, *self.args, **self.kwargs)
            self.statistic.success += 1
        except BaseException as e:
            self.statistic.error += 1
            exception = e
        finally:
            delta += time.monotonic()
            self.statistic.sum_time += delta
            self.statistic.done += 1

        try:
            if exception is not None:
                self.future.set_exception(exception)
            else:
                self.future.set_result(result)
        except InvalidStateError:
            log.debug(
                "Result of %r was dropped, the future is already resolved",
                self.func,
            )


class TaskChannelCloseException(RuntimeError):
    pass


class TaskChannel(SimpleQueue):
    """
    Work queue shared by the pool threads.

    :meth:`close` lets the threads finish every queued item first,
    :meth:`abort` makes them stop right after the current item.
    """

    closed_event: threading.Event

    def __init__(self) -> None:
        super().__init__()
        self.closed_event = threading.Event()

    def get(self, *args: Any, **kwargs: Any) -> WorkItem:
        if self.closed_event.is_set():
            raise TaskChannelCloseException()

        item: Optional[WorkItem] = super().get(*args, **kwargs)
        if item is None:
            # wake up the next thread
            self.put(None)
            raise TaskChannelCloseException()
        return item

    def close(self) -> None:
        self.put(None)

    def abort(self) -> List[WorkItem]:
        self.closed_event.set()

        items = []
        while True:
            try:
                item = super().get(block=False)
            except Empty:
                break
            if item is not None:
                items.append(item)

        self.put(None)
        return items


def thread_pool_thread_loop(
    tasks: TaskChannel,
    statistic: ThreadPoolStatistic,
    stop_event: threading.Event,
) -> None:
    statistic.threads += 1

    try:
        while True:
            tasks.get()()
    except TaskChannelCloseException:
        return None
    finally:
        statistic.threads -= 1
        stop_event.set()


class BatchExecutor(Executor):
    """
    Fixed size thread pool for independent units of work.

    Every thread is started in the constructor and the pool is never
    resized. :meth:`map_batch` blocks the caller until the whole batch
    is done and reports a failure of any unit as a single
    :class:`BatchMatchError`.
    """

    DEFAULT_POOL_SIZE = min(max(cpu_count() or 1, 4), 32)
    SHUTDOWN_TIMEOUT = 5.0

    def __init__(
        self, max_workers: Optional[int] = None,
        statistic_name: Optional[str] = None,
    ) -> None:
        if max_workers is None:
            max_workers = self.DEFAULT_POOL_SIZE

        if max_workers <= 0:
            raise ValueError("max_workers must be greater than 0")

        self._tasks = TaskChannel()
        self._futures: Set[Future] = set()
        self._thread_events: Set[threading.Event] = set()
        self._write_lock = threading.RLock()
        self._shutdown_event = threading.Event()
        self._max_workers = max_workers
        self._statistic = ThreadPoolStatistic(statistic_name)

        self._pool: FrozenSet[threading.Thread] = frozenset(
            self._start_thread(idx) for idx in range(max_workers)
        )

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def statistic(self) -> ThreadPoolStatistic:
        return self._statistic

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown_event.is_set()

    def _start_thread(self, idx: int) -> threading.Thread:
        event = threading.Event()
        self._thread_events.add(event)

        thread_name = f"Thread {idx}"
        if self._statistic.name:
            thread_name += f" from pool {self._statistic.name}"

        thread = threading.Thread(
            target=thread_pool_thread_loop,
            name=thread_name,
            daemon=True,
            args=(self._tasks, self._statistic, event),
        )
        thread.start()
        return thread

    def submit(     # type: ignore
        self, fn: Callable[..., T], *args: Any, **kwargs: Any,
    ) -> "Future[T]":
        """ Submit blocking function to the pool """
        if fn is None or not callable(fn):
            raise ValueError("First argument must be callable")

        with self._write_lock:
            if self._shutdown_event.is_set():
                raise RuntimeError("Pool is shutdown")

            future: Future = Future()
            self._futures.add(future)
            future.add_done_callback(self._futures.discard)

            self._tasks.put(
                WorkItem(
                    func=fn, args=args, kwargs=kwargs,
                    future=future, statistic=self._statistic,
                ),
            )
            self._statistic.submitted += 1
            return future

    def map_batch(
        self, fn: Callable[[K], T], items: Iterable[K],
    ) -> Dict[K, T]:
        """
        Calls ``fn`` for every distinct item in the pool and returns
        ``{item: fn(item)}``. Duplicates collapse into one entry.
        """
        unique = dict.fromkeys(items)
        if not unique:
            return {}

        futures: Dict[Future, K] = {}
        try:
            for item in unique:
                futures[self.submit(fn, item)] = item

            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        except BaseException:
            # interrupted while submitting or waiting
            self._cancel(futures)
            raise

        failed = [
            future for future in done
            if future.cancelled() or future.exception() is not None
        ]

        if failed or not_done:
            self._cancel(futures)

            cause: Optional[BaseException] = None
            if failed:
                first = failed[0]
                cause = (
                    CancelledError() if first.cancelled()
                    else first.exception()
                )

            raise BatchMatchError(
                "Batch of %d items failed, %d items were not processed" % (
                    len(futures), len(failed) + len(not_done),
                ),
            ) from cause

        return {item: future.result() for future, item in futures.items()}

    @staticmethod
    def _cancel(futures: Iterable[Future]) -> int:
        return sum(1 for future in futures if future.cancel())

    def _join(self, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        for event in self._thread_events:
            if not event.wait(max(deadline - time.monotonic(), 0)):
                return False
        return True

    def _force_cancel(self) -> int:
        cancelled = 0

        for item in self._tasks.abort():
            if item.future.cancel():
                cancelled += 1

        for future in list(self._futures):
            if future.done():
                continue

            # running futures can not be cancelled, fail them instead
            if not future.cancel():
                try:
                    future.set_exception(ThreadPoolException("Pool closed"))
                except InvalidStateError:
                    continue
            cancelled += 1

        self._statistic.cancelled += cancelled
        return cancelled

    # noinspection PyMethodOverriding
    def shutdown(   # type: ignore
        self, wait: bool = True, *, cancel_futures: bool = False,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Stops accepting new work and retires the pool threads.

        Queued work is allowed to finish within ``timeout`` seconds.
        After that every outstanding unit is cancelled and the pool
        waits ``timeout`` seconds more for the threads to stop.
        """
        with self._write_lock:
            if self._shutdown_event.is_set():
                return None

            self._shutdown_event.set()
            self._tasks.close()

        if timeout is None:
            timeout = self.SHUTDOWN_TIMEOUT

        try:
            if cancel_futures:
                self._force_cancel()

            if not wait:
                return None

            if self._join(timeout):
                log.debug("Pool %r has been shut down", self)
                return None

            log.warning(
                "Pool %r did not terminate gracefully within %.1f seconds. "
                "Forcing shutdown now.", self, timeout,
            )
            log.warning(
                "%d tasks were forcefully stopped.", self._force_cancel(),
            )

            if not self._join(timeout):
                log.error("Pool %r failed to terminate completely.", self)
        except BaseException:
            log.warning(
                "Shutdown of pool %r was interrupted. "
                "Forcing immediate shutdown.", self,
            )
            self._force_cancel()
            raise

    def __repr__(self) -> str:
        return "<%s: workers=%d%s>" % (
            self.__class__.__name__, self._max_workers,
            " shutdown" if self.is_shutdown else "",
        )

    def __del__(self) -> None:
        tasks = getattr(self, "_tasks", None)
        if tasks is not None and not self.is_shutdown:
            tasks.abort()


__all__ = (
    "BatchExecutor",
    "TaskChannel",
    "ThreadPoolStatistic",
    "WorkItem",
)
