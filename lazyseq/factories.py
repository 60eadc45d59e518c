import typing
from itertools import chain, repeat as _repeat
import numpy as np
from .types import *
from .errors import InvalidArgumentError

if typing.TYPE_CHECKING:
    from .sequence import Sequence

_NO_PREDICATE = object()


def from_collection(data: Iterable[T]) -> 'Sequence[T]':
    """create a finite sequence over an existing collection, in its order"""
    from .sequence import Sequence
    return Sequence(lambda: iter(data))


def of(*values: T) -> 'Sequence[T]':
    """create a sequence over the given values; no values gives an empty sequence"""
    from .sequence import Sequence
    return Sequence(lambda: iter(values))


def empty() -> 'Sequence[Any]':
    """create empty sequence"""
    from .sequence import Sequence
    return Sequence(lambda: iter(()))


def from_range(start: int, stop: int, step: int = 1) -> 'Sequence[int]':
    """create a sequence of ints from start (inclusive) to stop (exclusive)"""
    from .sequence import Sequence
    if step == 0:
        raise InvalidArgumentError("range step must not be zero")
    return Sequence(lambda: iter(range(start, stop, step)))


def generate(supplier: Supplier[T]) -> 'Sequence[T]':
    """
    create an unbounded sequence, calling supplier once per pulled element.
    bound it with limit() before any terminal that needs every element.
    """
    from .sequence import Sequence
    if not callable(supplier):
        raise InvalidArgumentError("generate supplier must be callable")
    return Sequence(lambda: (supplier() for _ in _repeat(None)))


def iterate(seed: T, *functions: Callable) -> 'Sequence[T]':
    """
    iterate(seed, successor): unbounded seed, successor(seed), successor(successor(seed)), ...
    iterate(seed, has_next, successor): the same, but only while has_next holds on
    the current value; stops quietly the first time it fails, the seed included.
    """
    from .sequence import Sequence
    if len(functions) == 1:
        has_next, successor = _NO_PREDICATE, functions[0]
    elif len(functions) == 2:
        has_next, successor = functions
        if not callable(has_next):
            raise InvalidArgumentError("iterate predicate must be callable")
    else:
        raise InvalidArgumentError("iterate takes (seed, successor) or (seed, has_next, successor)")
    if not callable(successor):
        raise InvalidArgumentError("iterate successor must be callable")

    def iterate_data():
        value = seed
        if has_next is _NO_PREDICATE:
            while True:
                yield value
                value = successor(value)
        while has_next(value):
            yield value
            value = successor(value)

    return Sequence(iterate_data)


def concat(first: 'Sequence[T]', second: 'Sequence[T]') -> 'Sequence[T]':
    """
    a lazy sequence of first's elements then second's. both handles are spent,
    and closing the result runs both pipelines' close handlers.
    """
    from .sequence import Sequence
    first._begin_terminal('concat')
    second._begin_terminal('concat')
    return Sequence(lambda: chain(first._elements(), second._elements())) \
        .on_close(first._pipeline.close) \
        .on_close(second._pipeline.close)


def random_supplier(rng: Optional[np.random.Generator] = None,
                    low: int = -2 ** 31, high: int = 2 ** 31) -> Supplier[int]:
    """
    a supplier of random ints in [low, high) for generate(). the random source
    is passed in explicitly; without one a fresh default_rng is used.
    """
    generator = rng if rng is not None else np.random.default_rng()
    return lambda: int(generator.integers(low, high))


# --- aliases ---
from_iterable = from_collection
seq = from_collection
S = from_collection
