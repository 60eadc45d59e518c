from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from itertools import chain
from .types import *
from .errors import ClosedSequenceError
from .parallel import map_chunks, map_chunks_unordered, run_stages, segment

# --- stage and terminal operations ---
from .extensions.core import _StageOperations
from .extensions.terminal import _TerminalOperations, TerminalAccessor

logger = logging.getLogger(__name__)

_STATE_MESSAGES = {
    SequenceState.LINKED: "sequence has already been operated upon",
    SequenceState.CONSUMED: "sequence has already been consumed or closed",
    SequenceState.INVALID: "sequence was invalidated by a failed evaluation",
}


class _Pipeline:
    """state shared by every handle of one pipeline: execution mode and close handlers"""

    def __init__(self):
        self.parallel = False
        self.close_handlers: List[Callable[[], Any]] = []
        self.closed = False

    def close(self, raise_errors: bool = True) -> None:
        """run every close handler once; the first failure is re-raised after all have run"""
        if self.closed:
            return
        self.closed = True
        first_error = None
        for handler in self.close_handlers:
            try:
                handler()
            except Exception as e:
                logger.warning(f"close handler {handler!r} failed: {e}")
                if first_error is None:
                    first_error = e
        if first_error is not None and raise_errors:
            raise first_error


# --- abstract base class ---

class ISequence(ABC, Generic[T]):
    @abstractmethod
    def _elements(self) -> Iterator[T]:
        """the pipeline's output as a plain iterator"""
        pass


# --- base sequence implementation ---

class _BaseSequence(ISequence[T]):
    def __init__(self, source: IteratorFunc[Any], stages: Tuple[Stage, ...] = (),
                 pipeline: Optional[_Pipeline] = None):
        """init with a function that returns a fresh source iterator when called"""
        self._source = source
        self._stages = stages
        self._pipeline = pipeline if pipeline is not None else _Pipeline()
        self._state = SequenceState.OPEN

    @property
    def state(self) -> SequenceState:
        return self._state

    @property
    def is_parallel(self) -> bool:
        return self._pipeline.parallel

    def _check_open(self, operation: str) -> None:
        if self._state is not SequenceState.OPEN:
            raise ClosedSequenceError(f"{operation}: {_STATE_MESSAGES[self._state]}")

    def _link(self, stage: Stage) -> 'Sequence[Any]':
        """wrap this handle in a stage, spending it"""
        self._check_open(stage.name)
        self._state = SequenceState.LINKED
        return Sequence(self._source, self._stages + (stage,), self._pipeline)

    def _begin_terminal(self, operation: str) -> None:
        self._check_open(operation)
        self._state = SequenceState.CONSUMED
        logger.debug(f"{operation} on {'parallel' if self.is_parallel else 'sequential'} "
                     f"pipeline of {len(self._stages)} stages")

    def _elements(self) -> Iterator[T]:
        source = iter(self._source())
        if not self.is_parallel:
            return run_stages(list(self._stages), source)
        it, trailing = segment(source, list(self._stages))
        if not trailing:
            return it
        return chain.from_iterable(map_chunks(it, lambda chunk: list(run_stages(trailing, chunk))))

    def _terminal(self, operation: str,
                  sequential: Callable[[Iterator[T]], U],
                  partial: Optional[Callable[[Iterator[T]], V]] = None,
                  combine: Optional[Callable[[Iterator[V]], U]] = None,
                  ordered: bool = True) -> U:
        """
        run a terminal operation and close the pipeline.

        sequentially, `sequential` consumes the whole element iterator. in parallel
        mode, `partial` folds each chunk on a worker (after the trailing stateless
        stages) and `combine` merges the partial results, which arrive in chunk
        order unless `ordered` is false.
        """
        self._begin_terminal(operation)
        try:
            if self.is_parallel and partial is not None:
                it, trailing = segment(iter(self._source()), list(self._stages))
                mapper = map_chunks if ordered else map_chunks_unordered
                result = combine(mapper(it, lambda chunk: partial(run_stages(trailing, chunk))))
            else:
                result = sequential(self._elements())
        except Exception:
            self._state = SequenceState.INVALID
            self._pipeline.close(raise_errors=False)
            raise
        self._pipeline.close()
        return result

    def _iterate_and_close(self) -> Iterator[T]:
        try:
            yield from self._elements()
        except Exception:
            self._state = SequenceState.INVALID
            raise
        finally:
            self._pipeline.close(raise_errors=False)

    # --- lifecycle ---

    def iterator(self) -> Iterator[T]:
        """hand the elements out as an iterator; the handle is spent immediately"""
        self._begin_terminal('iterator')
        return self._iterate_and_close()

    def __iter__(self) -> Iterator[T]:
        return self.iterator()

    def on_close(self, handler: Callable[[], Any]) -> 'Sequence[T]':
        """register a handler run once when the pipeline closes"""
        self._check_open('on_close')
        self._pipeline.close_handlers.append(handler)
        return self

    def close(self) -> None:
        """close without evaluating. closing twice is a no-op"""
        if self._state is SequenceState.OPEN:
            self._state = SequenceState.CONSUMED
        self._pipeline.close()

    def __enter__(self) -> 'Sequence[T]':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        stages = ', '.join(stage.name for stage in self._stages)
        mode = 'parallel' if self.is_parallel else 'sequential'
        return f"Sequence(state={self._state.value}, mode={mode}, stages=[{stages}])"


# --- main sequence class ---

class Sequence(
    _BaseSequence[T],
    _StageOperations[T],
    _TerminalOperations[T]
):
    """a lazy, single-use, pull-based sequence of elements."""
    def __init__(self, source: IteratorFunc[Any], stages: Tuple[Stage, ...] = (),
                 pipeline: Optional[_Pipeline] = None):
        super().__init__(source, stages, pipeline)
        # --- initialize accessors ---
        self.to = TerminalAccessor(self)
