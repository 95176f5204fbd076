from __future__ import annotations

import logging
import math
import operator
from collections.abc import Callable, Iterator
from typing import Generic

from pyoimap.configurations import Configurations
from pyoimap.indexes import IndexRecord
from pyoimap.sequence_store import Entry, KeyType, ValueType

logger = logging.getLogger(__name__)

Bucket = list[IndexRecord[KeyType, ValueType]]


class HashedKeyIndex(Generic[KeyType, ValueType]):
    """Key index of separately chained buckets.

    Index order is bucket order, then order inside a bucket. Records with equal keys are
    kept next to each other in their bucket, oldest first, so every equal range is a
    contiguous run.
    """

    ordered = False

    def __init__(
        self,
        hash_function: Callable[[KeyType], int] = hash,
        key_equal: Callable[[KeyType, KeyType], bool] = operator.eq,
        configurations: Configurations | None = None,
    ) -> None:
        self.hash_function = hash_function
        self.key_equal = key_equal
        self.configurations = configurations if configurations is not None else Configurations()
        self._max_load_factor = float(self.configurations.max_load_factor)
        self.buckets: list[Bucket[KeyType, ValueType]] = [
            [] for _ in range(self.configurations.initial_bucket_count)
        ]
        self.size = 0

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[IndexRecord[KeyType, ValueType]]:
        for bucket in self.buckets:
            yield from bucket

    def __reversed__(self) -> Iterator[IndexRecord[KeyType, ValueType]]:
        for bucket in reversed(self.buckets):
            yield from reversed(bucket)

    def empty_like(self) -> HashedKeyIndex[KeyType, ValueType]:
        index: HashedKeyIndex[KeyType, ValueType] = HashedKeyIndex(
            self.hash_function, self.key_equal, self.configurations
        )
        index.max_load_factor = self._max_load_factor
        return index

    def keys_equal(self, left: KeyType, right: KeyType) -> bool:
        return bool(self.key_equal(left, right))

    @property
    def bucket_count(self) -> int:
        return len(self.buckets)

    @property
    def load_factor(self) -> float:
        return self.size / len(self.buckets)

    @property
    def max_load_factor(self) -> float:
        return self._max_load_factor

    @max_load_factor.setter
    def max_load_factor(self, value: float) -> None:
        Configurations.FIELD_BY_NAME["max-load-factor"].validate(value)
        self._max_load_factor = float(value)
        if self.load_factor > self._max_load_factor:
            self.rehash(0)

    def bucket(self, key: KeyType) -> int:
        return self.hash_function(key) % len(self.buckets)

    def bucket_size(self, number: int) -> int:
        return len(self.buckets[number])

    def iter_bucket(self, number: int) -> Iterator[IndexRecord[KeyType, ValueType]]:
        yield from self.buckets[number]

    def rehash(self, count: int) -> None:
        """Rebuild the table with at least ``count`` buckets.

        Never shrinks below what the max load factor requires for the current size.
        """
        count = max(count, math.ceil(self.size / self._max_load_factor), 1)
        if count == len(self.buckets):
            return
        logger.debug("rehashing %d records from %d to %d buckets", self.size, len(self.buckets), count)
        records = list(self)
        self.buckets = [[] for _ in range(count)]
        for record in records:
            self._place(record)

    def reserve(self, count: int) -> None:
        self.rehash(math.ceil(count / self._max_load_factor))

    def _place(self, record: IndexRecord[KeyType, ValueType]) -> None:
        bucket = self.buckets[record.hash_value % len(self.buckets)]
        for offset in range(len(bucket) - 1, -1, -1):
            if self._matches(bucket[offset], record.hash_value, record.key):
                bucket.insert(offset + 1, record)
                return
        bucket.append(record)

    def _matches(self, record: IndexRecord[KeyType, ValueType], hash_value: int, key: KeyType) -> bool:
        return record.hash_value == hash_value and bool(self.key_equal(record.key, key))

    def _run(self, key: KeyType) -> tuple[int, int, int]:
        hash_value = self.hash_function(key)
        number = hash_value % len(self.buckets)
        bucket = self.buckets[number]
        start = 0
        while start < len(bucket) and not self._matches(bucket[start], hash_value, key):
            start += 1
        stop = start
        while stop < len(bucket) and self._matches(bucket[stop], hash_value, key):
            stop += 1
        return number, start, stop

    def _locate(self, record: IndexRecord[KeyType, ValueType]) -> tuple[int, int]:
        number = record.hash_value % len(self.buckets)
        for offset, candidate in enumerate(self.buckets[number]):
            if candidate is record:
                return number, offset
        raise ValueError(f"{record!r} is not in the index")

    def add(self, key: KeyType, entry: Entry[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType]:
        record = IndexRecord(key, entry, hash_value=self.hash_function(key))
        if self.size + 1 > len(self.buckets) * self._max_load_factor:
            self.rehash(
                max(
                    len(self.buckets) * self.configurations.growth_factor,
                    math.ceil((self.size + 1) / self._max_load_factor),
                )
            )
        self._place(record)
        self.size += 1
        return record

    def discard(self, record: IndexRecord[KeyType, ValueType]) -> None:
        number, offset = self._locate(record)
        del self.buckets[number][offset]
        self.size -= 1

    def clear(self) -> None:
        for bucket in self.buckets:
            bucket.clear()
        self.size = 0

    def find(self, key: KeyType) -> IndexRecord[KeyType, ValueType] | None:
        number, start, stop = self._run(key)
        return self.buckets[number][start] if start < stop else None

    def count(self, key: KeyType) -> int:
        _, start, stop = self._run(key)
        return stop - start

    def equal_records(self, key: KeyType) -> list[IndexRecord[KeyType, ValueType]]:
        number, start, stop = self._run(key)
        return self.buckets[number][start:stop]

    def equal_bounds(
        self, key: KeyType
    ) -> tuple[IndexRecord[KeyType, ValueType] | None, IndexRecord[KeyType, ValueType] | None]:
        number, start, stop = self._run(key)
        if start == stop:
            return None, None
        return self.buckets[number][start], next(self._walk_forward(number, stop), None)

    def first(self) -> IndexRecord[KeyType, ValueType] | None:
        return next(self._walk_forward(0, 0), None)

    def last(self) -> IndexRecord[KeyType, ValueType] | None:
        return next(iter(reversed(self)), None)

    def successor(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None:
        number, offset = self._locate(record)
        return next(self._walk_forward(number, offset + 1), None)

    def predecessor(self, record: IndexRecord[KeyType, ValueType]) -> IndexRecord[KeyType, ValueType] | None:
        number, offset = self._locate(record)
        return next(self._walk_backward(number, offset - 1), None)

    def _walk_forward(self, number: int, offset: int) -> Iterator[IndexRecord[KeyType, ValueType]]:
        while number < len(self.buckets):
            bucket = self.buckets[number]
            while offset < len(bucket):
                yield bucket[offset]
                offset += 1
            number += 1
            offset = 0

    def _walk_backward(self, number: int, offset: int) -> Iterator[IndexRecord[KeyType, ValueType]]:
        while number >= 0:
            bucket = self.buckets[number]
            while offset >= 0:
                yield bucket[offset]
                offset -= 1
            number -= 1
            if number >= 0:
                offset = len(self.buckets[number]) - 1
