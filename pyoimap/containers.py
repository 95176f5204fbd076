from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Generic, Self, overload

from pyoimap.cardinality import CardinalityPolicy
from pyoimap.errors import (
    EndPositionError,
    ErasedEntryError,
    InconsistentContainerError,
    InvalidPositionError,
)
from pyoimap.indexes import KeyIndex
from pyoimap.positions import (
    IndexIterator,
    IndexPosition,
    Position,
    ReverseIndexIterator,
    ReverseSequenceIterator,
    SequenceIterator,
)
from pyoimap.sequence_store import Entry, KeyType, SequenceStore, ValueType

logger = logging.getLogger(__name__)


ItemsSource = Mapping[KeyType, ValueType] | Iterable[tuple[KeyType, ValueType]]


def iter_source_items(items: Any) -> Iterator[tuple[Any, Any]]:  # noqa: ANN401
    if isinstance(items, OrderedInsertionContainer):
        return items.items()
    if isinstance(items, Mapping):
        return iter(items.items())
    return iter(items)


class OrderedInsertionCore(Generic[KeyType, ValueType]):
    """A sequence store and a key index kept in lock step by a cardinality policy.

    The index records are the only links between the two structures. The core does no
    locking, callers sharing one across threads have to serialize access themselves.
    """

    def __init__(self, index: KeyIndex[KeyType, ValueType], policy: CardinalityPolicy) -> None:
        self.store: SequenceStore[KeyType, ValueType] = SequenceStore()
        self.index = index
        self.policy = policy

    def __len__(self) -> int:
        return len(self.store)

    def empty_like(self) -> OrderedInsertionCore[KeyType, ValueType]:
        return OrderedInsertionCore(self.index.empty_like(), self.policy)

    def copy(self) -> OrderedInsertionCore[KeyType, ValueType]:
        logger.debug("copying %d entries into a rebuilt index", len(self.store))
        new_core = self.empty_like()
        for entry in self.store:
            new_core.policy.append(new_core.index, new_core.store, entry.key, entry.value)
        return new_core

    def begin(self) -> Position[KeyType, ValueType]:
        return Position(self, self.store.first)

    def end(self) -> Position[KeyType, ValueType]:
        return Position(self, self.store.sentinel)

    def index_begin(self) -> IndexPosition[KeyType, ValueType]:
        return IndexPosition(self, self.index.first())

    def index_end(self) -> IndexPosition[KeyType, ValueType]:
        return IndexPosition(self, None)

    def position_of(self, entry: Entry[KeyType, ValueType] | None) -> Position[KeyType, ValueType]:
        return Position(self, entry if entry is not None else self.store.sentinel)

    def check(self, position: Position[KeyType, ValueType] | IndexPosition[KeyType, ValueType]) -> None:
        if position.core is not self:
            raise InvalidPositionError("position belongs to another container")
        if not position.is_valid:
            raise ErasedEntryError()

    def insert(
        self, key: KeyType, create_value: Callable[[], ValueType]
    ) -> tuple[Position[KeyType, ValueType], bool]:
        entry, inserted = self.policy.insert(self.index, self.store, key, create_value)
        return Position(self, entry), inserted

    def find(self, key: KeyType) -> Position[KeyType, ValueType]:
        record = self.index.find(key)
        return self.position_of(record.entry if record is not None else None)

    def count(self, key: KeyType) -> int:
        return self.index.count(key)

    def erase_key(self, key: KeyType) -> int:
        return self.policy.erase_key(self.index, self.store, key)

    @overload
    def erase_at(self, position: Position[KeyType, ValueType]) -> Position[KeyType, ValueType]: ...

    @overload
    def erase_at(self, position: IndexPosition[KeyType, ValueType]) -> IndexPosition[KeyType, ValueType]: ...

    def erase_at(
        self, position: Position[KeyType, ValueType] | IndexPosition[KeyType, ValueType]
    ) -> Position[KeyType, ValueType] | IndexPosition[KeyType, ValueType]:
        self.check(position)
        if isinstance(position, IndexPosition):
            record = position.checked_record()
            following_record = self.index.successor(record)
            self.policy.erase_record(self.index, self.store, record)
            return IndexPosition(self, following_record)
        if position.is_end:
            raise EndPositionError()
        return Position(self, self.policy.erase_entry(self.index, self.store, position.entry))

    @overload
    def erase_range(
        self, first: Position[KeyType, ValueType], last: Position[KeyType, ValueType]
    ) -> Position[KeyType, ValueType]: ...

    @overload
    def erase_range(
        self, first: IndexPosition[KeyType, ValueType], last: IndexPosition[KeyType, ValueType]
    ) -> IndexPosition[KeyType, ValueType]: ...

    def erase_range(self, first: Any, last: Any) -> Any:  # noqa: ANN401
        if type(first) is not type(last):
            raise InvalidPositionError("range bounds must be positions of the same kind")
        self.check(first)
        self.check(last)
        self._check_range_order(first, last)
        while first != last:
            first = self.erase_at(first)
        return last

    def _check_range_order(self, first: Any, last: Any) -> None:  # noqa: ANN401
        if isinstance(first, IndexPosition):
            record = first.record
            while record is not last.record:
                if record is None:
                    raise InvalidPositionError("erase range end does not follow its start")
                record = self.index.successor(record)
            return
        entry = first.entry
        while entry is not last.entry:
            if entry is self.store.sentinel:
                raise InvalidPositionError("erase range end does not follow its start")
            entry = entry.next

    def lower_bound(self, key: KeyType) -> Position[KeyType, ValueType] | IndexPosition[KeyType, ValueType]:
        record = self.index.lower_bound(key)  # type: ignore[attr-defined]
        if self.policy.multiple:
            return IndexPosition(self, record)
        return self.position_of(record.entry if record is not None else None)

    def upper_bound(self, key: KeyType) -> Position[KeyType, ValueType] | IndexPosition[KeyType, ValueType]:
        record = self.index.upper_bound(key)  # type: ignore[attr-defined]
        if self.policy.multiple:
            return IndexPosition(self, record)
        return self.position_of(record.entry if record is not None else None)

    def equal_range(
        self, key: KeyType
    ) -> (
        tuple[Position[KeyType, ValueType], Position[KeyType, ValueType]]
        | tuple[IndexPosition[KeyType, ValueType], IndexPosition[KeyType, ValueType]]
    ):
        if self.policy.multiple:
            first, stop = self.index.equal_bounds(key)
            return IndexPosition(self, first), IndexPosition(self, stop)
        # a single entry per key, so its sequence neighbour closes the range
        record = self.index.find(key)
        if record is None:
            return self.end(), self.end()
        return Position(self, record.entry), Position(self, record.entry.next)

    def splice(
        self,
        destination: Position[KeyType, ValueType],
        first: Position[KeyType, ValueType],
        last: Position[KeyType, ValueType] | None = None,
    ) -> None:
        self.check(destination)
        self.check(first)
        if first.is_end:
            raise EndPositionError()
        if last is None:
            self.store.splice(destination.entry, first.entry)
            return
        self.check(last)
        entry = first.entry
        while entry is not last.entry:
            if entry is self.store.sentinel:
                raise InvalidPositionError("splice range end does not follow its start")
            if entry is destination.entry:
                raise InvalidPositionError("splice destination lies inside the moved range")
            entry = entry.next
        self.store.splice(destination.entry, first.entry, last.entry)

    def clear(self) -> None:
        self.index.clear()
        self.store.clear()

    def verify(self) -> None:
        if len(self.store) != len(self.index):
            raise InconsistentContainerError(
                f"sequence holds {len(self.store)} entries but the index holds {len(self.index)} records"
            )
        referenced: set[int] = set()
        for record in self.index:
            if not self.store.owns(record.entry):
                raise InconsistentContainerError(f"{record!r} references an erased entry")
            if not self.index.keys_equal(record.key, record.entry.key):
                raise InconsistentContainerError(f"{record!r} key differs from its entry key")
            referenced.add(id(record.entry))
        if len(referenced) != len(self.store):
            raise InconsistentContainerError("some entries are referenced by more than one index record")
        if not self.policy.multiple:
            for entry in self.store:
                if self.index.count(entry.key) != 1:
                    raise InconsistentContainerError(f"key {entry.key!r} is indexed more than once")


class OrderedInsertionContainer(Generic[KeyType, ValueType]):
    """Behaviour shared by every variant: sequence order, positions, erase and splice.

    Not thread safe. Wrap shared instances with an external lock.
    """

    def __init__(self, core: OrderedInsertionCore[KeyType, ValueType]) -> None:
        self._core = core

    def _new_like(self, core: OrderedInsertionCore[KeyType, ValueType]) -> Self:
        new_container = type(self).__new__(type(self))
        new_container.__dict__.update(self.__dict__)
        new_container._core = core
        return new_container

    # Capacity

    def __len__(self) -> int:
        return len(self._core)

    def __bool__(self) -> bool:
        return len(self._core) > 0

    # Iteration

    def __iter__(self) -> Iterator[KeyType]:
        for entry in self._core.store:
            yield entry.key

    def __reversed__(self) -> Iterator[KeyType]:
        for entry in reversed(self._core.store):
            yield entry.key

    def __contains__(self, key: object) -> bool:
        return self._core.index.find(key) is not None  # type: ignore[arg-type]

    def keys(self) -> Iterator[KeyType]:
        return iter(self)

    def values(self) -> Iterator[ValueType]:
        for entry in self._core.store:
            yield entry.value

    def items(self) -> SequenceIterator[KeyType, ValueType]:
        return SequenceIterator(self._core.begin())

    def reversed_items(self) -> ReverseSequenceIterator[KeyType, ValueType]:
        return ReverseSequenceIterator(self._core.begin())

    def index_items(self) -> IndexIterator[KeyType, ValueType]:
        return IndexIterator(self._core.index_begin())

    def reversed_index_items(self) -> ReverseIndexIterator[KeyType, ValueType]:
        return ReverseIndexIterator(self._core.index_begin())

    # Positions

    def begin(self) -> Position[KeyType, ValueType]:
        return self._core.begin()

    def end(self) -> Position[KeyType, ValueType]:
        return self._core.end()

    def index_begin(self) -> IndexPosition[KeyType, ValueType]:
        return self._core.index_begin()

    def index_end(self) -> IndexPosition[KeyType, ValueType]:
        return self._core.index_end()

    # Lookup

    def find(self, key: KeyType) -> Position[KeyType, ValueType]:
        return self._core.find(key)

    def count(self, key: KeyType) -> int:
        return self._core.count(key)

    def equal_range(
        self, key: KeyType
    ) -> (
        tuple[Position[KeyType, ValueType], Position[KeyType, ValueType]]
        | tuple[IndexPosition[KeyType, ValueType], IndexPosition[KeyType, ValueType]]
    ):
        return self._core.equal_range(key)

    # Modifiers

    def insert_many(self, items: ItemsSource[KeyType, ValueType]) -> None:
        for key, value in iter_source_items(items):
            self._core.insert(key, lambda value=value: value)

    def erase(self, key: KeyType) -> int:
        return self._core.erase_key(key)

    @overload
    def erase_at(self, position: Position[KeyType, ValueType]) -> Position[KeyType, ValueType]: ...

    @overload
    def erase_at(self, position: IndexPosition[KeyType, ValueType]) -> IndexPosition[KeyType, ValueType]: ...

    def erase_at(self, position: Any) -> Any:  # noqa: ANN401
        return self._core.erase_at(position)

    @overload
    def erase_range(
        self, first: Position[KeyType, ValueType], last: Position[KeyType, ValueType]
    ) -> Position[KeyType, ValueType]: ...

    @overload
    def erase_range(
        self, first: IndexPosition[KeyType, ValueType], last: IndexPosition[KeyType, ValueType]
    ) -> IndexPosition[KeyType, ValueType]: ...

    def erase_range(self, first: Any, last: Any) -> Any:  # noqa: ANN401
        return self._core.erase_range(first, last)

    def popitem(self, last: bool = True) -> tuple[KeyType, ValueType]:
        if not self:
            raise KeyError(f"{type(self).__name__} is empty")
        position = Position(self._core, self._core.store.last if last else self._core.store.first)
        item = position.item
        self._core.erase_at(position)
        return item

    def splice(
        self,
        destination: Position[KeyType, ValueType],
        first: Position[KeyType, ValueType],
        last: Position[KeyType, ValueType] | None = None,
    ) -> None:
        self._core.splice(destination, first, last)

    def swap(self, other: Self) -> None:
        if type(other) is not type(self):
            raise TypeError(f"cannot swap {type(self).__name__} with {type(other).__name__}")
        self._core, other._core = other._core, self._core

    def clear(self) -> None:
        self._core.clear()

    def take(self) -> Self:
        """Move the contents into a new container in O(1), leaving this one empty."""
        logger.debug("moving %d entries out of %s", len(self._core), type(self).__name__)
        moved = self._new_like(self._core)
        self._core = self._core.empty_like()
        return moved

    def copy(self) -> Self:
        return self._new_like(self._core.copy())

    def __copy__(self) -> Self:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        new_core = self._core.empty_like()
        for entry in self._core.store:
            new_core.policy.append(
                new_core.index, new_core.store, copy.deepcopy(entry.key, memo), copy.deepcopy(entry.value, memo)
            )
        return self._new_like(new_core)

    def verify_consistency(self) -> None:
        self._core.verify()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedInsertionContainer) or type(other) is not type(self):
            return NotImplemented
        return len(self) == len(other) and all(mine == theirs for mine, theirs in zip(self.items(), other.items()))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.items())!r})"
