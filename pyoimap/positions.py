from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic

from pyoimap.errors import EndPositionError, ErasedEntryError, InvalidPositionError
from pyoimap.indexes import IndexRecord
from pyoimap.sequence_store import Entry, KeyType, ValueType

if TYPE_CHECKING:
    from pyoimap.containers import OrderedInsertionCore


class Position(Generic[KeyType, ValueType]):
    """A stable reference to an entry in insertion (sequence) order.

    Stays valid across any insertion and any erase of other entries. ``end()`` is a
    position too: it can be stepped back from and compared, but not dereferenced.
    """

    __slots__ = ("core", "entry")

    def __init__(self, core: OrderedInsertionCore[KeyType, ValueType], entry: Entry[KeyType, ValueType]) -> None:
        self.core = core
        self.entry = entry

    @property
    def is_end(self) -> bool:
        return self.entry is self.core.store.sentinel

    @property
    def is_valid(self) -> bool:
        return self.core.store.owns(self.entry)

    def checked_entry(self) -> Entry[KeyType, ValueType]:
        if not self.is_valid:
            raise ErasedEntryError()
        if self.is_end:
            raise EndPositionError()
        return self.entry

    @property
    def key(self) -> KeyType:
        return self.checked_entry().key

    @property
    def value(self) -> ValueType:
        return self.checked_entry().value

    @value.setter
    def value(self, value: ValueType) -> None:
        self.checked_entry().value = value

    @property
    def item(self) -> tuple[KeyType, ValueType]:
        return self.checked_entry().item

    def next(self) -> Position[KeyType, ValueType]:
        return Position(self.core, self.checked_entry().next)

    def previous(self) -> Position[KeyType, ValueType]:
        if not self.is_valid:
            raise ErasedEntryError()
        preceding = self.entry.previous
        if preceding is self.core.store.sentinel:
            raise InvalidPositionError("cannot step before the first position")
        return Position(self.core, preceding)

    def to_index_position(self) -> IndexPosition[KeyType, ValueType]:
        if not self.is_valid:
            raise ErasedEntryError()
        if self.is_end:
            return IndexPosition(self.core, None)
        return IndexPosition(self.core, self.core.policy.locate_record(self.core.index, self.entry))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.core is other.core and self.entry is other.entry

    def __hash__(self) -> int:
        return hash((id(self.core), id(self.entry)))

    def __repr__(self) -> str:
        if self.is_end:
            return "Position(end)"
        if not self.is_valid:
            return "Position(erased)"
        return f"Position({self.entry.key!r}, {self.entry.value!r})"


class IndexPosition(Generic[KeyType, ValueType]):
    """A reference to an index record, in key order (sorted) or bucket order (hashed).

    ``record`` is ``None`` for the end of the index.
    """

    __slots__ = ("core", "record")

    def __init__(
        self, core: OrderedInsertionCore[KeyType, ValueType], record: IndexRecord[KeyType, ValueType] | None
    ) -> None:
        self.core = core
        self.record = record

    @property
    def is_end(self) -> bool:
        return self.record is None

    @property
    def is_valid(self) -> bool:
        return self.record is None or self.core.store.owns(self.record.entry)

    def checked_record(self) -> IndexRecord[KeyType, ValueType]:
        if self.record is None:
            raise EndPositionError()
        if not self.core.store.owns(self.record.entry):
            raise ErasedEntryError()
        return self.record

    @property
    def key(self) -> KeyType:
        return self.checked_record().key

    @property
    def value(self) -> ValueType:
        return self.checked_record().entry.value

    @value.setter
    def value(self, value: ValueType) -> None:
        self.checked_record().entry.value = value

    @property
    def item(self) -> tuple[KeyType, ValueType]:
        return self.checked_record().entry.item

    def next(self) -> IndexPosition[KeyType, ValueType]:
        return IndexPosition(self.core, self.core.index.successor(self.checked_record()))

    def previous(self) -> IndexPosition[KeyType, ValueType]:
        if self.record is None:
            preceding = self.core.index.last()
        else:
            preceding = self.core.index.predecessor(self.checked_record())
        if preceding is None:
            raise InvalidPositionError("cannot step before the first index position")
        return IndexPosition(self.core, preceding)

    def to_position(self) -> Position[KeyType, ValueType]:
        if self.record is None:
            return Position(self.core, self.core.store.sentinel)
        return Position(self.core, self.checked_record().entry)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexPosition):
            return NotImplemented
        return self.core is other.core and self.record is other.record

    def __hash__(self) -> int:
        return hash((id(self.core), id(self.record)))

    def __repr__(self) -> str:
        if self.record is None:
            return "IndexPosition(end)"
        if not self.is_valid:
            return "IndexPosition(erased)"
        return f"IndexPosition({self.record.key!r}, {self.record.entry.value!r})"


def _same_core(first: Any, last: Any) -> None:  # noqa: ANN401
    if last is not None and first.core is not last.core:
        raise InvalidPositionError("range bounds belong to different containers")


class SequenceIterator(Iterator[tuple[KeyType, ValueType]]):
    """Walks ``[first, last)`` in sequence order; ``last`` defaults to the end."""

    def __init__(
        self, first: Position[KeyType, ValueType], last: Position[KeyType, ValueType] | None = None
    ) -> None:
        _same_core(first, last)
        if not first.is_valid:
            raise ErasedEntryError()
        self.core = first.core
        self._current: Entry[KeyType, ValueType] = first.entry
        self._stop = last.entry if last is not None else self.core.store.sentinel

    def __iter__(self) -> SequenceIterator[KeyType, ValueType]:
        return self

    def __next__(self) -> tuple[KeyType, ValueType]:
        entry = self._current
        if entry is self._stop or entry is self.core.store.sentinel:
            raise StopIteration
        self._current = entry.next
        return entry.item

    @property
    def position(self) -> Position[KeyType, ValueType] | None:
        if self._current is self._stop or self._current is self.core.store.sentinel:
            return None
        return Position(self.core, self._current)


class ReverseSequenceIterator(Iterator[tuple[KeyType, ValueType]]):
    """Walks ``[first, last)`` backwards, starting right before ``last``."""

    def __init__(
        self, first: Position[KeyType, ValueType], last: Position[KeyType, ValueType] | None = None
    ) -> None:
        _same_core(first, last)
        self.core = first.core
        stop = last.entry if last is not None else self.core.store.sentinel
        if not self.core.store.owns(stop) or not first.is_valid:
            raise ErasedEntryError()
        self._current: Entry[KeyType, ValueType] = stop.previous
        self._stop = first.entry.previous
        if first.entry is stop:
            self._current = self._stop

    def __iter__(self) -> ReverseSequenceIterator[KeyType, ValueType]:
        return self

    def __next__(self) -> tuple[KeyType, ValueType]:
        entry = self._current
        if entry is self._stop or entry is self.core.store.sentinel:
            raise StopIteration
        self._current = entry.previous
        return entry.item

    @property
    def position(self) -> Position[KeyType, ValueType] | None:
        if self._current is self._stop or self._current is self.core.store.sentinel:
            return None
        return Position(self.core, self._current)


class IndexIterator(Iterator[tuple[KeyType, ValueType]]):
    """Walks ``[first, last)`` in index order; ``last`` defaults to the index end.

    Steps record by record, so erasing the entry just handed out leaves the walk intact.
    """

    def __init__(
        self, first: IndexPosition[KeyType, ValueType], last: IndexPosition[KeyType, ValueType] | None = None
    ) -> None:
        _same_core(first, last)
        if not first.is_valid or (last is not None and not last.is_valid):
            raise ErasedEntryError()
        self.core = first.core
        self._first = first.record
        self._stop = last.record if last is not None else None
        self._upcoming = self._start()

    def _start(self) -> IndexRecord[KeyType, ValueType] | None:
        if self._first is self._stop:
            return None
        return self._first

    def _step(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None:
        following = self.core.index.successor(record)
        return None if following is self._stop else following

    def __iter__(self) -> IndexIterator[KeyType, ValueType]:
        return self

    def __next__(self) -> tuple[KeyType, ValueType]:
        record = self._upcoming
        if record is None:
            raise StopIteration
        self._upcoming = self._step(record)
        return record.key, record.entry.value

    @property
    def position(self) -> IndexPosition[KeyType, ValueType] | None:
        if self._upcoming is None:
            return None
        return IndexPosition(self.core, self._upcoming)


class ReverseIndexIterator(IndexIterator):
    """Walks ``[first, last)`` of the index backwards, starting right before ``last``."""

    def _start(self) -> IndexRecord[KeyType, ValueType] | None:
        if self._first is None or self._first is self._stop:
            return None
        if self._stop is None:
            return self.core.index.last()
        return self.core.index.predecessor(self._stop)

    def _step(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None:
        if record is self._first:
            return None
        return self.core.index.predecessor(record)
