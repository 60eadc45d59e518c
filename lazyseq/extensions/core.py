from __future__ import annotations
import operator
import typing
from functools import cmp_to_key
from itertools import islice, takewhile, dropwhile
from ..types import *
from ..errors import InvalidArgumentError

if typing.TYPE_CHECKING:
    from ..sequence import Sequence


def _require_callable(func: Any, name: str) -> None:
    if not callable(func):
        raise InvalidArgumentError(f"{name} must be callable, got {type(func).__name__}")


def _require_count(count: Any, name: str) -> int:
    """the count as a plain int; numpy integers are accepted"""
    # bool is an int subclass but never a meaningful count
    if isinstance(count, bool):
        raise InvalidArgumentError(f"{name} count must be an int, got bool")
    try:
        count = operator.index(count)
    except TypeError:
        raise InvalidArgumentError(f"{name} count must be an int, got {type(count).__name__}") from None
    if count < 0:
        raise InvalidArgumentError(f"{name} count must be >= 0, got {count}")
    return count


def _distinct(upstream: Iterator[T], key_selector: Optional[KeySelector[T, K]]) -> Iterator[T]:
    seen = set()
    seen_unhashable = []
    for item in upstream:
        key = key_selector(item) if key_selector else item
        try:
            if key in seen:
                continue
            seen.add(key)
        except TypeError:
            # unhashable keys fall back to an equality scan
            if key in seen_unhashable:
                continue
            seen_unhashable.append(key)
        yield item


class _StageOperations(Generic[T]):
    """intermediate operations. each one spends its handle and returns a new, still lazy one"""

    def filter(self: 'Sequence[T]', predicate: Predicate[T]) -> 'Sequence[T]':
        """keep elements where the predicate holds"""
        _require_callable(predicate, 'filter predicate')
        return self._link(Stage('filter', lambda it: (x for x in it if predicate(x))))

    def map(self: 'Sequence[T]', selector: Selector[T, U]) -> 'Sequence[U]':
        """project each element to a new form"""
        _require_callable(selector, 'map selector')
        return self._link(Stage('map', lambda it: (selector(x) for x in it)))

    def flat_map(self: 'Sequence[T]', selector: Selector[T, Iterable[U]]) -> 'Sequence[U]':
        """project each element to an iterable and flatten the results"""
        _require_callable(selector, 'flat_map selector')
        return self._link(Stage('flat_map', lambda it: (y for x in it for y in selector(x))))

    def peek(self: 'Sequence[T]', action: Consumer[T]) -> 'Sequence[T]':
        """call action on each element as it is pulled through"""
        _require_callable(action, 'peek action')

        def peek_stage(it):
            for item in it:
                action(item)
                yield item
        return self._link(Stage('peek', peek_stage))

    def distinct(self: 'Sequence[T]', key_selector: Optional[KeySelector[T, K]] = None) -> 'Sequence[T]':
        """first occurrence of each value (or key), order of first appearance preserved"""
        if key_selector is not None:
            _require_callable(key_selector, 'distinct key selector')
        return self._link(Stage('distinct', lambda it: _distinct(it, key_selector), stateful=True))

    def limit(self: 'Sequence[T]', count: int) -> 'Sequence[T]':
        """
        at most the first count elements. upstream is never pulled past the
        count-th element, which is what makes limit() bound an unbounded source.
        """
        count = _require_count(count, 'limit')
        return self._link(Stage('limit', lambda it: islice(it, count), stateful=True))

    def skip(self: 'Sequence[T]', count: int) -> 'Sequence[T]':
        """discard the first count elements"""
        count = _require_count(count, 'skip')
        return self._link(Stage('skip', lambda it: islice(it, count, None), stateful=True))

    def take_while(self: 'Sequence[T]', predicate: Predicate[T]) -> 'Sequence[T]':
        """elements up to (not including) the first one failing the predicate"""
        _require_callable(predicate, 'take_while predicate')
        return self._link(Stage('take_while', lambda it: takewhile(predicate, it), stateful=True))

    def drop_while(self: 'Sequence[T]', predicate: Predicate[T]) -> 'Sequence[T]':
        """elements from the first one failing the predicate onward"""
        _require_callable(predicate, 'drop_while predicate')
        return self._link(Stage('drop_while', lambda it: dropwhile(predicate, it), stateful=True))

    def sorted(self: 'Sequence[T]', key: Optional[KeySelector[T, K]] = None,
               reverse: bool = False, comparator: Optional[Comparer[T]] = None) -> 'Sequence[T]':
        """stable sort. a barrier: the whole upstream is materialized first"""
        if key is not None and comparator is not None:
            raise InvalidArgumentError("sorted takes a key or a comparator, not both")
        sort_key = cmp_to_key(comparator) if comparator is not None else key
        return self._link(Stage('sorted', lambda it: iter(sorted(it, key=sort_key, reverse=reverse)),
                                stateful=True))

    # --- execution mode ---

    def parallel(self: 'Sequence[T]') -> 'Sequence[T]':
        """evaluate the whole pipeline on the shared worker pool"""
        self._check_open('parallel')
        self._pipeline.parallel = True
        return self

    def sequential(self: 'Sequence[T]') -> 'Sequence[T]':
        """evaluate the whole pipeline on the calling thread"""
        self._check_open('sequential')
        self._pipeline.parallel = False
        return self

    # --- aliases ---
    where = filter
    select = map
    select_many = flat_map
    take = limit
