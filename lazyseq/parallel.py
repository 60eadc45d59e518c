"""
shared worker pool and chunked evaluation for parallel pipelines.

a parallel pipeline pulls its input in chunks, submits one wave of chunks
(as many as there are workers) to the pool, and hands the chunk results back
in chunk order before pulling the next wave. pulling wave by wave keeps
evaluation lazy, so short-circuiting terminals and limit() over unbounded
sources still terminate.
"""
from __future__ import annotations
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, Future, as_completed
from itertools import islice, chain
from .types import *
from .config import get_config

logger = logging.getLogger(__name__)

_pool: Optional[ThreadPoolExecutor] = None
_pool_lock = threading.Lock()
_worker_state = threading.local()


def get_pool() -> ThreadPoolExecutor:
    """the process-wide pool, created on first use"""
    global _pool
    if _pool is None:
        with _pool_lock:
            if _pool is None:
                workers = get_config().workers
                _pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='lazyseq-worker')
                logger.debug(f"created worker pool with {workers} workers")
    return _pool


def shutdown_pool(wait: bool = True) -> None:
    """dispose of the shared pool; the next parallel terminal creates a new one"""
    global _pool
    with _pool_lock:
        pool, _pool = _pool, None
    if pool is not None:
        pool.shutdown(wait=wait)
        logger.debug("worker pool shut down")


def chunked(source: Iterator[T], size: int) -> Iterator[List[T]]:
    """split an iterator into lists of at most size elements"""
    while True:
        chunk = list(islice(source, size))
        if not chunk:
            return
        yield chunk


def _waves(source: Iterator[T], chunk_size: int, workers: int) -> Iterator[List[List[T]]]:
    chunks = chunked(source, chunk_size)
    while True:
        wave = list(islice(chunks, workers))
        if not wave:
            return
        yield wave


def _submit_wave(pool: ThreadPoolExecutor, chunk_fn: Callable[[List[T]], U],
                 wave: List[List[T]]) -> List[Future]:
    logger.debug(f"submitting wave of {len(wave)} chunks ({sum(len(c) for c in wave)} elements)")
    return [pool.submit(_run_on_worker, chunk_fn, chunk) for chunk in wave]


def _run_on_worker(chunk_fn: Callable[[List[T]], U], chunk: List[T]) -> U:
    _worker_state.active = True
    try:
        return chunk_fn(chunk)
    finally:
        _worker_state.active = False


def in_worker() -> bool:
    """true while the calling thread is running a chunk for the shared pool"""
    return getattr(_worker_state, 'active', False)


def _map_inline(source: Iterator[T], chunk_fn: Callable[[List[T]], U]) -> Iterator[U]:
    # a worker waiting on chunks queued behind its own would never be woken
    for chunk in chunked(source, get_config().chunk_size):
        yield chunk_fn(chunk)


def map_chunks(source: Iterator[T], chunk_fn: Callable[[List[T]], U]) -> Iterator[U]:
    """
    apply chunk_fn to every chunk of source on the pool, yielding results in chunk order.
    worker exceptions propagate to the consumer when the failing chunk's result is reached.
    a pipeline started from inside a worker runs its chunks on that worker.
    """
    if in_worker():
        yield from _map_inline(source, chunk_fn)
        return
    config = get_config()
    pool = get_pool()
    for wave in _waves(source, config.chunk_size, config.workers):
        futures = _submit_wave(pool, chunk_fn, wave)
        try:
            for future in futures:
                yield future.result()
        finally:
            # a consumer that stops early must not leave queued chunks behind
            for future in futures:
                future.cancel()


def map_chunks_unordered(source: Iterator[T], chunk_fn: Callable[[List[T]], U]) -> Iterator[U]:
    """like map_chunks, but each wave's results come back in completion order"""
    if in_worker():
        yield from _map_inline(source, chunk_fn)
        return
    config = get_config()
    pool = get_pool()
    for wave in _waves(source, config.chunk_size, config.workers):
        futures = _submit_wave(pool, chunk_fn, wave)
        try:
            for future in as_completed(futures):
                yield future.result()
        finally:
            for future in futures:
                future.cancel()


def run_stages(stages: List[Stage], chunk: Iterable[T]) -> Iterator[Any]:
    """pull a chunk through a run of stages"""
    it = iter(chunk)
    for stage in stages:
        it = stage(it)
    return it


def segment(source: Iterator[T], stages: List[Stage]) -> Tuple[Iterator[Any], List[Stage]]:
    """
    evaluate a pipeline for parallel execution up to its last stateful stage.

    every run of stateless stages ahead of a stateful one is mapped over the
    pool chunk by chunk and flattened back in encounter order; the stateful
    stage then sees the whole ordered stream. returns the resulting iterator
    together with the trailing stateless stages, which the terminal operation
    fuses into its own per-chunk work.
    """
    it = source
    pending: List[Stage] = []
    for stage in stages:
        if not stage.stateful:
            pending.append(stage)
            continue
        if pending:
            run = list(pending)
            it = chain.from_iterable(map_chunks(it, lambda chunk, run=run: list(run_stages(run, chunk))))
            pending = []
        it = stage(it)
    return it, pending
