from __future__ import annotations

import itertools
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, Self

from sortedcontainers import SortedKeyList

from pyoimap.sequence_store import Entry, KeyType, ValueType


@dataclass(eq=False, slots=True)
class IndexRecord(Generic[KeyType, ValueType]):
    key: KeyType
    entry: Entry[KeyType, ValueType]
    serial: int = field(default=0)
    hash_value: int = field(default=0)


class KeyIndex(Protocol[KeyType, ValueType]):
    ordered: bool

    def __len__(self) -> int: ...

    def __iter__(self) -> Iterator[IndexRecord[KeyType, ValueType]]: ...

    def empty_like(self) -> Self: ...

    def add(self, key: KeyType, entry: Entry[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType]: ...

    def discard(self, record: IndexRecord[KeyType, ValueType]) -> None: ...

    def clear(self) -> None: ...

    def find(self, key: KeyType) -> IndexRecord[KeyType, ValueType] | None: ...

    def count(self, key: KeyType) -> int: ...

    def equal_records(self, key: KeyType) -> list[IndexRecord[KeyType, ValueType]]: ...

    def equal_bounds(
        self, key: KeyType
    ) -> tuple[IndexRecord[KeyType, ValueType] | None, IndexRecord[KeyType, ValueType] | None]: ...

    def first(self) -> IndexRecord[KeyType, ValueType] | None: ...

    def last(self) -> IndexRecord[KeyType, ValueType] | None: ...

    def successor(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None: ...

    def predecessor(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None: ...

    def keys_equal(self, left: KeyType, right: KeyType) -> bool: ...


def identity(value: Any) -> Any:  # noqa: ANN401
    return value


class SortedKeyIndex(Generic[KeyType, ValueType]):
    """Key index kept in ``key_order`` order.

    Records of equal keys are ordered by a monotonically increasing serial, so same-key
    peers keep their insertion order and every record has a unique sort position.
    """

    ordered = True

    def __init__(self, key_order: Callable[[KeyType], Any] | None = None) -> None:
        self.key_order: Callable[[KeyType], Any] = key_order or identity
        self.records: SortedKeyList = SortedKeyList(key=self._record_order)
        self._serials = itertools.count()

    def _record_order(self, record: IndexRecord[KeyType, ValueType]) -> tuple[Any, int]:
        return self.key_order(record.key), record.serial

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[IndexRecord[KeyType, ValueType]]:
        return iter(self.records)

    def __reversed__(self) -> Iterator[IndexRecord[KeyType, ValueType]]:
        return reversed(self.records)

    def empty_like(self) -> SortedKeyIndex[KeyType, ValueType]:
        return SortedKeyIndex(self.key_order)

    def keys_equal(self, left: KeyType, right: KeyType) -> bool:
        return bool(self.key_order(left) == self.key_order(right))

    def key_comp(self) -> Callable[[KeyType, KeyType], bool]:
        def less(left: KeyType, right: KeyType) -> bool:
            return bool(self.key_order(left) < self.key_order(right))

        return less

    def add(self, key: KeyType, entry: Entry[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType]:
        record = IndexRecord(key, entry, serial=next(self._serials))
        self.records.add(record)
        return record

    def discard(self, record: IndexRecord[KeyType, ValueType]) -> None:
        del self.records[self.index_of(record)]

    def clear(self) -> None:
        self.records.clear()

    def index_of(self, record: IndexRecord[KeyType, ValueType]) -> int:
        position = self.records.bisect_key_left(self._record_order(record))
        if position == len(self.records) or self.records[position] is not record:
            raise ValueError(f"{record!r} is not in the index")
        return position

    def record_at(self, position: int) -> IndexRecord[KeyType, ValueType] | None:
        if 0 <= position < len(self.records):
            return self.records[position]
        return None

    def lower_position(self, key: KeyType) -> int:
        return self.records.bisect_key_left((self.key_order(key),))

    def upper_position(self, key: KeyType) -> int:
        return self.records.bisect_key_right((self.key_order(key), math.inf))

    def lower_bound(self, key: KeyType) -> IndexRecord[KeyType, ValueType] | None:
        return self.record_at(self.lower_position(key))

    def upper_bound(self, key: KeyType) -> IndexRecord[KeyType, ValueType] | None:
        return self.record_at(self.upper_position(key))

    def equal_bounds(
        self, key: KeyType
    ) -> tuple[IndexRecord[KeyType, ValueType] | None, IndexRecord[KeyType, ValueType] | None]:
        return self.lower_bound(key), self.upper_bound(key)

    def find(self, key: KeyType) -> IndexRecord[KeyType, ValueType] | None:
        record = self.lower_bound(key)
        if record is not None and self.keys_equal(record.key, key):
            return record
        return None

    def count(self, key: KeyType) -> int:
        return self.upper_position(key) - self.lower_position(key)

    def equal_records(self, key: KeyType) -> list[IndexRecord[KeyType, ValueType]]:
        return list(self.records.islice(self.lower_position(key), self.upper_position(key)))

    def first(self) -> IndexRecord[KeyType, ValueType] | None:
        return self.record_at(0)

    def last(self) -> IndexRecord[KeyType, ValueType] | None:
        return self.record_at(len(self.records) - 1)

    def successor(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None:
        return self.record_at(self.index_of(record) + 1)

    def predecessor(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None:
        return self.record_at(self.index_of(record) - 1)
