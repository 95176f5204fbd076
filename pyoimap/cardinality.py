from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from pyoimap.errors import InconsistentContainerError
from pyoimap.indexes import IndexRecord, KeyIndex
from pyoimap.sequence_store import Entry, KeyType, SequenceStore, ValueType


class CardinalityPolicy:
    """How many entries a key may own, and what insert and erase mean because of it.

    Every mutation goes through the index before the sequence is touched on erase, and
    after the sequence append on insert. A failed index update rolls the append back.
    """

    multiple: ClassVar[bool]

    def insert(
        self,
        index: KeyIndex[KeyType, ValueType],
        store: SequenceStore[KeyType, ValueType],
        key: KeyType,
        create_value: Callable[[], ValueType],
    ) -> tuple[Entry[KeyType, ValueType], bool]:
        raise NotImplementedError()

    def erase_key(
        self, index: KeyIndex[KeyType, ValueType], store: SequenceStore[KeyType, ValueType], key: KeyType
    ) -> int:
        raise NotImplementedError()

    def locate_record(
        self, index: KeyIndex[KeyType, ValueType], entry: Entry[KeyType, ValueType]
    ) -> IndexRecord[KeyType, ValueType]:
        raise NotImplementedError()

    def erase_entry(
        self,
        index: KeyIndex[KeyType, ValueType],
        store: SequenceStore[KeyType, ValueType],
        entry: Entry[KeyType, ValueType],
    ) -> Entry[KeyType, ValueType]:
        index.discard(self.locate_record(index, entry))
        return store.remove(entry)

    @staticmethod
    def erase_record(
        index: KeyIndex[KeyType, ValueType],
        store: SequenceStore[KeyType, ValueType],
        record: IndexRecord[KeyType, ValueType],
    ) -> None:
        index.discard(record)
        store.remove(record.entry)

    @staticmethod
    def append(
        index: KeyIndex[KeyType, ValueType],
        store: SequenceStore[KeyType, ValueType],
        key: KeyType,
        value: ValueType,
    ) -> Entry[KeyType, ValueType]:
        entry = store.append(key, value)
        try:
            index.add(key, entry)
        except BaseException:
            store.remove(entry)
            raise
        return entry


class UniqueKeys(CardinalityPolicy):
    multiple = False

    def insert(
        self,
        index: KeyIndex[KeyType, ValueType],
        store: SequenceStore[KeyType, ValueType],
        key: KeyType,
        create_value: Callable[[], ValueType],
    ) -> tuple[Entry[KeyType, ValueType], bool]:
        record = index.find(key)
        if record is not None:
            return record.entry, False
        return self.append(index, store, key, create_value()), True

    def erase_key(
        self, index: KeyIndex[KeyType, ValueType], store: SequenceStore[KeyType, ValueType], key: KeyType
    ) -> int:
        record = index.find(key)
        if record is None:
            return 0
        self.erase_record(index, store, record)
        return 1

    def locate_record(
        self, index: KeyIndex[KeyType, ValueType], entry: Entry[KeyType, ValueType]
    ) -> IndexRecord[KeyType, ValueType]:
        record = index.find(entry.key)
        if record is None or record.entry is not entry:
            raise InconsistentContainerError(f"no index record for {entry!r}")
        return record


class MultipleKeys(CardinalityPolicy):
    multiple = True

    def insert(
        self,
        index: KeyIndex[KeyType, ValueType],
        store: SequenceStore[KeyType, ValueType],
        key: KeyType,
        create_value: Callable[[], ValueType],
    ) -> tuple[Entry[KeyType, ValueType], bool]:
        return self.append(index, store, key, create_value()), True

    def erase_key(
        self, index: KeyIndex[KeyType, ValueType], store: SequenceStore[KeyType, ValueType], key: KeyType
    ) -> int:
        records = index.equal_records(key)
        for record in records:
            self.erase_record(index, store, record)
        return len(records)

    def locate_record(
        self, index: KeyIndex[KeyType, ValueType], entry: Entry[KeyType, ValueType]
    ) -> IndexRecord[KeyType, ValueType]:
        # same-key peers share the key, only the referenced entry tells them apart
        for record in index.equal_records(entry.key):
            if record.entry is entry:
                return record
        raise InconsistentContainerError(f"no index record for {entry!r}")
