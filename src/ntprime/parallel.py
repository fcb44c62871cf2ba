# src/ntprime/parallel.py
"""
Fork-join helpers over a process pool.

Every task is a pure function of its arguments; results are aggregated in
the parent after the parallel phase. Work functions and predicates must be
picklable (module-level functions or functools.partial of them).
"""

from __future__ import annotations

import multiprocessing
import os
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from typing import Any, TypeVar

from ntprime.runtime import CFG, trace

T = TypeVar("T")
R = TypeVar("R")


def worker_count() -> int:
    """PARALLEL.WORKERS, where 0 (or anything below 1) means one per CPU."""
    try:
        n = int(CFG("PARALLEL.WORKERS", 0))
    except (TypeError, ValueError):
        n = 0
    if n < 1:
        n = os.cpu_count() or 1
    return n


def _chunk_size() -> int:
    return max(1, int(CFG("PARALLEL.CHUNK_SIZE", 1024)))


def _executor(workers: int) -> ProcessPoolExecutor:
    """Pool using PARALLEL.START_METHOD (fork, spawn, forkserver) when set."""
    method = CFG("PARALLEL.START_METHOD", None)
    ctx = multiprocessing.get_context(str(method)) if method else None
    return ProcessPoolExecutor(max_workers=workers, mp_context=ctx)


def should_parallelize(total_items: int) -> bool:
    return worker_count() > 1 and total_items >= int(CFG("PARALLEL.MIN_ITEMS", 4096))


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def _filter_chunk(pred: Callable[[T], bool], chunk: Sequence[T]) -> list[T]:
    return [x for x in chunk if pred(x)]


def parallel_filter(pred: Callable[[T], bool], items: Sequence[T]) -> list[T]:
    """
    Items for which pred holds, in input order.

    Order comes from re-assembling chunks by index, not from completion
    order, so the result is deterministic.
    """
    items = list(items)
    if not should_parallelize(len(items)):
        return _filter_chunk(pred, items)

    chunks = chunked(items, _chunk_size())
    workers = min(worker_count(), len(chunks))
    trace("parallel", f"filter {len(items)} items in {len(chunks)} chunks on {workers} workers")
    with _executor(workers) as executor:
        parts = list(executor.map(_filter_chunk, [pred] * len(chunks), chunks))

    out: list[T] = []
    for part in parts:
        out.extend(part)
    return out


def parallel_map(fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
    """fn over items, results in input order."""
    items = list(items)
    if not should_parallelize(len(items)):
        return [fn(x) for x in items]

    workers = min(worker_count(), len(items))
    trace("parallel", f"map {len(items)} items on {workers} workers")
    with _executor(workers) as executor:
        return list(executor.map(fn, items, chunksize=_chunk_size()))


def parallel_find_first(task: Callable[..., R | None], arg_sets: Iterable[tuple[Any, ...]]) -> R | None:
    """
    Run task(*args) for every argument tuple and return the first non-None
    result reported by any worker (not necessarily the one from the earliest
    tuple). Pending tasks are cancelled once a result is found.
    """
    arg_sets = list(arg_sets)
    if not arg_sets:
        return None

    if worker_count() <= 1 or len(arg_sets) == 1:
        for args in arg_sets:
            res = task(*args)
            if res is not None:
                return res
        return None

    workers = min(worker_count(), len(arg_sets))
    trace("parallel", f"search {len(arg_sets)} tasks on {workers} workers")
    executor = _executor(workers)
    try:
        pending: set[Future] = {executor.submit(task, *args) for args in arg_sets}
        while pending:
            done, pending = wait(pending, return_when=FIRST_COMPLETED)
            for fut in done:
                res = fut.result()
                if res is not None:
                    return res
        return None
    finally:
        # running tasks finish in the background; queued ones are dropped
        executor.shutdown(wait=False, cancel_futures=True)
