from enum import Enum
from typing import (
    TypeVar, Generic, Callable, Iterator, Iterable, Any, Optional, Union,
    Dict, List, Tuple, Set, Type
)

from .errors import NoValueError

T = TypeVar('T')
U = TypeVar('U')
K = TypeVar('K')
V = TypeVar('V')

Predicate = Callable[[T], bool]
Selector = Callable[[T], U]
KeySelector = Callable[[T], K]
Comparer = Callable[[T, T], int]
BinaryOperator = Callable[[T, T], T]
Supplier = Callable[[], T]
Consumer = Callable[[T], Any]
IteratorFunc = Callable[[], Iterator[T]]


class SequenceState(Enum):
    """lifecycle tag carried by every sequence handle"""
    OPEN = 'open'
    LINKED = 'linked'  # wrapped by a stage, the pipeline lives on in the new handle
    CONSUMED = 'consumed'
    INVALID = 'invalid'


class Stage(Generic[T, U]):
    """
    a named iterator transform. stateless stages see one element at a time and
    may be run per chunk on the worker pool; stateful stages need the whole
    ordered stream and act as a barrier under parallel evaluation.
    """

    def __init__(self, name: str, apply: Callable[[Iterator[T]], Iterator[U]], stateful: bool = False):
        self.name = name
        self.apply = apply
        self.stateful = stateful

    def __call__(self, upstream: Iterator[T]) -> Iterator[U]:
        return self.apply(upstream)

    def __repr__(self) -> str:
        return f"Stage(name={self.name}, stateful={self.stateful})"


class Option(Generic[T]):
    """
    explicit presence/absence of a terminal result.
    returned by reduce, min, max, find_first and find_any instead of none,
    so that a none element is never mistaken for "no value".
    """

    __slots__ = ('_value', '_present')
    _EMPTY: 'Option[Any]' = None

    def __init__(self, value: Optional[T] = None, present: bool = False):
        self._value = value
        self._present = present

    @classmethod
    def of(cls, value: T) -> 'Option[T]':
        return cls(value, True)

    @classmethod
    def empty(cls) -> 'Option[Any]':
        if cls._EMPTY is None:
            cls._EMPTY = cls()
        return cls._EMPTY

    @property
    def is_present(self) -> bool: return self._present

    @property
    def is_empty(self) -> bool: return not self._present

    def get(self) -> T:
        """the held value, raising NoValueError when there is none"""
        if not self._present:
            raise NoValueError("no value present")
        return self._value

    def or_else(self, default: T) -> T:
        return self._value if self._present else default

    def or_else_get(self, supplier: Supplier[T]) -> T:
        return self._value if self._present else supplier()

    def if_present(self, action: Consumer[T]) -> None:
        if self._present:
            action(self._value)

    def map(self, selector: Selector[T, U]) -> 'Option[U]':
        return Option.of(selector(self._value)) if self._present else Option.empty()

    def filter(self, predicate: Predicate[T]) -> 'Option[T]':
        return self if self._present and predicate(self._value) else Option.empty()

    def __bool__(self) -> bool:
        return self._present

    def __eq__(self, other) -> bool:
        if not isinstance(other, Option):
            return NotImplemented
        if not self._present or not other._present:
            return self._present == other._present
        return self._value == other._value

    def __hash__(self) -> int:
        return hash((self._present, self._value)) if self._present else hash(None)

    def __repr__(self) -> str:
        return f"Option({self._value!r})" if self._present else "Option.empty"
