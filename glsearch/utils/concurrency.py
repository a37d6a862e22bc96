from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def fan_out(
        func: Callable[[T], R],
        items: Sequence[T],
        *,
        max_workers: int,
        thread_name_prefix: str = "glsearch",
) -> Iterator[tuple[T, Future[R]]]:
    """
    Run `func` once per item on a bounded thread pool and yield in completion order.

    Every item gets its own unit, duplicates included. Each yielded future is
    already done; calling `.result()` re-raises the unit's exception, so the
    consumer decides whether a failure is fatal.

    If the consumer stops early (break, or an exception while handling a
    result), units that have not started yet are cancelled. Units already
    running are allowed to finish.
    """
    if not items:
        return

    executor = ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(items))),
        thread_name_prefix=thread_name_prefix,
    )
    futures: dict[Future[R], T] = {executor.submit(func, item): item for item in items}
    try:
        for fut in as_completed(futures):
            yield futures[fut], fut
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
