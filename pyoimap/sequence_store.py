from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Generic, TypeVar

KeyType = TypeVar("KeyType")
ValueType = TypeVar("ValueType")


class Entry(Generic[KeyType, ValueType]):
    """A key/value pair linked into a :class:`SequenceStore`.

    The key is read-only once the entry exists, the value may be replaced freely.
    ``store`` is cleared when the entry is unlinked, which is how positions detect
    that the entry they name was erased.
    """

    __slots__ = ("_key", "next", "previous", "store", "value")

    def __init__(self, key: KeyType, value: ValueType, store: SequenceStore[KeyType, ValueType] | None = None) -> None:
        self._key = key
        self.value = value
        self.store = store
        self.previous: Entry[KeyType, ValueType] = self
        self.next: Entry[KeyType, ValueType] = self

    @property
    def key(self) -> KeyType:
        return self._key

    @property
    def item(self) -> tuple[KeyType, ValueType]:
        return self._key, self.value

    def __repr__(self) -> str:
        return f"Entry({self._key!r}, {self.value!r})"


class SequenceStore(Generic[KeyType, ValueType]):
    """Circular doubly-linked list of entries around a sentinel.

    The sentinel doubles as the end position, so ``sentinel.next`` is the first entry
    and ``sentinel.previous`` the last one.
    """

    def __init__(self) -> None:
        self.sentinel: Entry[Any, Any] = Entry(None, None, self)
        self.size = 0

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Entry[KeyType, ValueType]]:
        entry = self.sentinel.next
        while entry is not self.sentinel:
            following = entry.next
            yield entry
            entry = following

    def __reversed__(self) -> Iterator[Entry[KeyType, ValueType]]:
        entry = self.sentinel.previous
        while entry is not self.sentinel:
            preceding = entry.previous
            yield entry
            entry = preceding

    @property
    def first(self) -> Entry[KeyType, ValueType]:
        return self.sentinel.next

    @property
    def last(self) -> Entry[KeyType, ValueType]:
        return self.sentinel.previous

    def owns(self, entry: Entry[Any, Any]) -> bool:
        return entry.store is self

    def append(self, key: KeyType, value: ValueType) -> Entry[KeyType, ValueType]:
        return self.insert_before(self.sentinel, key, value)

    def insert_before(
        self, anchor: Entry[KeyType, ValueType], key: KeyType, value: ValueType
    ) -> Entry[KeyType, ValueType]:
        entry = Entry(key, value, self)
        self._link_before(anchor, entry, entry)
        self.size += 1
        return entry

    def remove(self, entry: Entry[KeyType, ValueType]) -> Entry[KeyType, ValueType]:
        following = entry.next
        self._unlink(entry, entry)
        entry.store = None
        entry.previous = entry.next = entry
        self.size -= 1
        return following

    def splice(
        self,
        destination: Entry[KeyType, ValueType],
        first: Entry[KeyType, ValueType],
        last: Entry[KeyType, ValueType] | None = None,
    ) -> None:
        """Move ``[first, last)`` to just before ``destination``.

        ``last`` defaults to the entry after ``first``. ``destination`` must not lie
        strictly inside the range.
        """
        if last is None:
            last = first.next
        if first is last or destination is first or destination is last:
            return
        tail = last.previous
        self._unlink(first, tail)
        self._link_before(destination, first, tail)

    def clear(self) -> None:
        for entry in self:
            entry.store = None
            entry.previous = entry.next = entry
        self.sentinel.previous = self.sentinel.next = self.sentinel
        self.size = 0

    @staticmethod
    def _link_before(
        anchor: Entry[KeyType, ValueType], head: Entry[KeyType, ValueType], tail: Entry[KeyType, ValueType]
    ) -> None:
        preceding = anchor.previous
        preceding.next = head
        head.previous = preceding
        tail.next = anchor
        anchor.previous = tail

    @staticmethod
    def _unlink(head: Entry[KeyType, ValueType], tail: Entry[KeyType, ValueType]) -> None:
        head.previous.next = tail.next
        tail.next.previous = head.previous
