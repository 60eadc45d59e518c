from __future__ import annotations
import typing
import numpy as np
import pandas as pd
from functools import reduce
from itertools import chain
from ..types import *
from ..errors import InvalidArgumentError
from .core import _require_callable

if typing.TYPE_CHECKING:
    from ..sequence import Sequence

_NO_IDENTITY = object()


def _fold(operator: BinaryOperator[T], items: Iterable[T]) -> Option[T]:
    """left fold without a seed; empty input gives an empty option"""
    it = iter(items)
    for accumulated in it:
        for item in it:
            accumulated = operator(accumulated, item)
        return Option.of(accumulated)
    return Option.empty()


def _first(items: Iterable[T]) -> Option[T]:
    for item in items:
        return Option.of(item)
    return Option.empty()


def _first_present(options: Iterable[Option[T]]) -> Option[T]:
    for option in options:
        if option:
            return option
    return Option.empty()


def _present_values(options: Iterable[Option[T]]) -> Iterator[T]:
    return (option.get() for option in options if option)


def _drain(results: Iterable[Any]) -> None:
    for _ in results:
        pass


def _comparison(comparator: Optional[Comparer[T]], key: Optional[KeySelector[T, K]]) -> Comparer[T]:
    if comparator is not None and key is not None:
        raise InvalidArgumentError("pass a comparator or a key, not both")
    if comparator is not None:
        _require_callable(comparator, 'comparator')
        return comparator
    select = key if key is not None else (lambda x: x)
    if key is not None:
        _require_callable(key, 'key')

    def natural(a, b):
        ka, kb = select(a), select(b)
        return -1 if ka < kb else (1 if kb < ka else 0)
    return natural


def _extreme(items: Iterable[T], compare: Comparer[T], sign: int) -> Option[T]:
    """
    the min (sign=-1) or max (sign=1) element. the comparison is strict,
    so on ties the first-encountered element is kept.
    """
    it = iter(items)
    for best in it:
        for item in it:
            if compare(item, best) * sign > 0:
                best = item
        return Option.of(best)
    return Option.empty()


class _TerminalOperations(Generic[T]):
    """terminal operations. each one evaluates the pipeline and closes the handle"""

    def for_each(self: 'Sequence[T]', action: Consumer[T]) -> None:
        """
        call action on every element. sequential pipelines visit elements in
        encounter order; parallel pipelines run action on the worker threads
        with no ordering guarantee. use for_each_ordered when order matters.
        """
        _require_callable(action, 'for_each action')

        def visit(items):
            for item in items:
                action(item)
        self._terminal('for_each', visit, partial=visit, combine=_drain, ordered=False)

    def for_each_ordered(self: 'Sequence[T]', action: Consumer[T]) -> None:
        """call action on every element in encounter order, in either mode"""
        _require_callable(action, 'for_each_ordered action')

        def visit(items):
            for item in items:
                action(item)
        self._terminal('for_each_ordered', visit, partial=list,
                       combine=lambda chunks: visit(chain.from_iterable(chunks)))

    def count(self: 'Sequence[T]') -> int:
        """
        number of elements. the whole sequence is pulled, so an unbounded
        sequence must be bounded (limit, take_while) first or this never returns.
        """
        counter = lambda items: sum(1 for _ in items)
        return self._terminal('count', counter, partial=counter, combine=sum)

    def reduce(self: 'Sequence[T]', operator: BinaryOperator[T], identity: Any = _NO_IDENTITY) -> Any:
        """
        fold the elements pairwise with operator. without identity the result is an
        option, empty for an empty sequence; with identity it is a plain value.
        operator must be associative for parallel results to match sequential ones.
        """
        _require_callable(operator, 'reduce operator')
        if identity is _NO_IDENTITY:
            return self._terminal('reduce', lambda items: _fold(operator, items),
                                  partial=lambda items: _fold(operator, items),
                                  combine=lambda partials: _fold(operator, _present_values(partials)))
        seeded = lambda items: reduce(operator, items, identity)
        return self._terminal('reduce', seeded, partial=seeded, combine=seeded)

    def min(self: 'Sequence[T]', comparator: Optional[Comparer[T]] = None,
            key: Optional[KeySelector[T, K]] = None) -> Option[T]:
        """smallest element; ties keep the first encountered"""
        compare = _comparison(comparator, key)
        pick = lambda items: _extreme(items, compare, -1)
        return self._terminal('min', pick, partial=pick,
                              combine=lambda partials: pick(_present_values(partials)))

    def max(self: 'Sequence[T]', comparator: Optional[Comparer[T]] = None,
            key: Optional[KeySelector[T, K]] = None) -> Option[T]:
        """largest element; ties keep the first encountered"""
        compare = _comparison(comparator, key)
        pick = lambda items: _extreme(items, compare, 1)
        return self._terminal('max', pick, partial=pick,
                              combine=lambda partials: pick(_present_values(partials)))

    def find_first(self: 'Sequence[T]') -> Option[T]:
        """first element in encounter order, in either mode"""
        return self._terminal('find_first', _first, partial=_first, combine=_first_present)

    def find_any(self: 'Sequence[T]') -> Option[T]:
        """some element. in parallel mode whichever chunk finishes first wins"""
        return self._terminal('find_any', _first, partial=_first, combine=_first_present, ordered=False)

    def any_match(self: 'Sequence[T]', predicate: Predicate[T]) -> bool:
        """true as soon as one element satisfies predicate; false when empty"""
        _require_callable(predicate, 'any_match predicate')
        test = lambda items: any(predicate(x) for x in items)
        return self._terminal('any_match', test, partial=test, combine=any)

    def all_match(self: 'Sequence[T]', predicate: Predicate[T]) -> bool:
        """false as soon as one element fails predicate; true when empty"""
        _require_callable(predicate, 'all_match predicate')
        test = lambda items: all(predicate(x) for x in items)
        return self._terminal('all_match', test, partial=test, combine=all)

    def none_match(self: 'Sequence[T]', predicate: Predicate[T]) -> bool:
        """false as soon as one element satisfies predicate; true when empty"""
        _require_callable(predicate, 'none_match predicate')
        test = lambda items: any(predicate(x) for x in items)
        return self._terminal('none_match', lambda items: not test(items), partial=test,
                              combine=lambda partials: not any(partials))

    def sum(self: 'Sequence[T]') -> Union[int, float]:
        """sum of numeric elements, 0 when empty"""
        return self._terminal('sum', sum, partial=sum, combine=sum)

    def average(self: 'Sequence[T]') -> Option[float]:
        """arithmetic mean of numeric elements, empty when there are none"""
        def totals(items):
            count, total = 0, 0
            for x in items:
                count += 1
                total += x
            return count, total

        def mean(pairs):
            count, total = 0, 0
            for c, t in pairs:
                count += c
                total += t
            return Option.of(total / count) if count else Option.empty()
        return self._terminal('average', lambda items: mean([totals(items)]),
                              partial=totals, combine=mean)

    def collect(self: 'Sequence[T]', kind: Any = list) -> Any:
        """
        materialize into a container. kind is a type or callable taking an iterable
        (list, tuple, set, frozenset, dict of pairs, ...) or one of the names
        'list', 'tuple', 'set', 'frozenset', 'array', 'series', 'frame'.
        """
        if isinstance(kind, str):
            method = _COLLECT_NAMES.get(kind)
            if method is None:
                raise InvalidArgumentError(f"unknown collection kind '{kind}', "
                                           f"expected one of {sorted(_COLLECT_NAMES)}")
            return getattr(self.to, method)()
        if not callable(kind):
            raise InvalidArgumentError(f"collection kind must be a name or callable, got {kind!r}")
        return self.to.materialize(kind, operation='collect')


_COLLECT_NAMES = {
    'list': 'list',
    'tuple': 'tuple',
    'set': 'set',
    'frozenset': 'frozenset',
    'array': 'array',
    'series': 'pandas',
    'frame': 'df',
}


class TerminalAccessor(Generic[T]):
    """collection conversions, reached through `sequence.to`. each one is a terminal operation"""

    def __init__(self, sequence_instance: 'Sequence[T]'):
        self._sequence = sequence_instance

    def materialize(self, finisher: Callable[[Iterable[T]], U], operation: str = 'to') -> U:
        """feed every element, in encounter order, to finisher"""
        return self._sequence._terminal(operation, finisher, partial=list,
                                        combine=lambda chunks: finisher(chain.from_iterable(chunks)))

    def list(self) -> List[T]:
        """convert to list"""
        return self.materialize(list, 'to.list')

    def tuple(self) -> Tuple[T, ...]:
        """convert to tuple"""
        return self.materialize(tuple, 'to.tuple')

    def set(self) -> Set[T]:
        """convert to set"""
        return self.materialize(set, 'to.set')

    def frozenset(self) -> typing.FrozenSet[T]:
        """convert to frozenset"""
        return self.materialize(frozenset, 'to.frozenset')

    def dict(self, key_selector: KeySelector[T, K],
             value_selector: Optional[Selector[T, V]] = None) -> Dict[K, V]:
        """convert to dictionary; later keys overwrite earlier ones"""
        _require_callable(key_selector, 'dict key selector')
        val_sel = value_selector if value_selector else lambda item: item
        return self.materialize(lambda items: {key_selector(item): val_sel(item) for item in items}, 'to.dict')

    def array(self) -> np.ndarray:
        """convert to numpy array"""
        return self.materialize(lambda items: np.array(list(items)), 'to.array')

    def pandas(self) -> pd.Series:
        """convert to pandas series"""
        return self.materialize(lambda items: pd.Series(list(items)), 'to.pandas')

    def df(self) -> pd.DataFrame:
        """convert to pandas dataframe"""
        return self.materialize(lambda items: pd.DataFrame(list(items)), 'to.df')

    def joining(self, separator: str = '', prefix: str = '', suffix: str = '') -> str:
        """concatenate the string form of every element"""
        return self.materialize(lambda items: prefix + separator.join(str(x) for x in items) + suffix,
                                'to.joining')
