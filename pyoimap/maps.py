from __future__ import annotations

import operator
from collections.abc import Callable, Iterator
from typing import Any, ParamSpec

from pyoimap.cardinality import MultipleKeys, UniqueKeys
from pyoimap.configurations import Configurations
from pyoimap.containers import ItemsSource, OrderedInsertionContainer, OrderedInsertionCore
from pyoimap.errors import KeyNotFoundError
from pyoimap.hashed_indexes import HashedKeyIndex
from pyoimap.indexes import SortedKeyIndex
from pyoimap.positions import IndexPosition, Position
from pyoimap.sequence_store import KeyType, ValueType

FactoryParameters = ParamSpec("FactoryParameters")

_MISSING: Any = object()


class SortedContainer(OrderedInsertionContainer[KeyType, ValueType]):
    @property
    def _sorted_index(self) -> SortedKeyIndex[KeyType, ValueType]:
        return self._core.index  # type: ignore[return-value]

    @property
    def key_order(self) -> Callable[[KeyType], Any]:
        return self._sorted_index.key_order

    def key_comp(self) -> Callable[[KeyType, KeyType], bool]:
        return self._sorted_index.key_comp()

    def value_comp(self) -> Callable[[tuple[KeyType, ValueType], tuple[KeyType, ValueType]], bool]:
        less = self._sorted_index.key_comp()

        def item_less(left: tuple[KeyType, ValueType], right: tuple[KeyType, ValueType]) -> bool:
            return less(left[0], right[0])

        return item_less


class HashedContainer(OrderedInsertionContainer[KeyType, ValueType]):
    @property
    def _hashed_index(self) -> HashedKeyIndex[KeyType, ValueType]:
        return self._core.index  # type: ignore[return-value]

    @property
    def hash_function(self) -> Callable[[KeyType], int]:
        return self._hashed_index.hash_function

    @property
    def key_equal(self) -> Callable[[KeyType, KeyType], bool]:
        return self._hashed_index.key_equal

    @property
    def configurations(self) -> Configurations:
        return self._hashed_index.configurations

    @property
    def bucket_count(self) -> int:
        return self._hashed_index.bucket_count

    @property
    def load_factor(self) -> float:
        return self._hashed_index.load_factor

    @property
    def max_load_factor(self) -> float:
        return self._hashed_index.max_load_factor

    @max_load_factor.setter
    def max_load_factor(self, value: float) -> None:
        self._hashed_index.max_load_factor = value

    def rehash(self, count: int) -> None:
        self._hashed_index.rehash(count)

    def reserve(self, count: int) -> None:
        self._hashed_index.reserve(count)

    def bucket(self, key: KeyType) -> int:
        return self._hashed_index.bucket(key)

    def bucket_size(self, number: int) -> int:
        return self._hashed_index.bucket_size(number)

    def iter_bucket(self, number: int) -> Iterator[tuple[KeyType, ValueType]]:
        for record in self._hashed_index.iter_bucket(number):
            yield record.key, record.entry.value


class UniqueKeysMixin(OrderedInsertionContainer[KeyType, ValueType]):
    """Map semantics: one entry per key, the first insert wins."""

    default_factory: Callable[[], ValueType] | None

    def insert(self, key: KeyType, value: ValueType) -> tuple[Position[KeyType, ValueType], bool]:
        return self._core.insert(key, lambda: value)

    def emplace(
        self,
        key: KeyType,
        factory: Callable[FactoryParameters, ValueType],
        *args: FactoryParameters.args,
        **kwargs: FactoryParameters.kwargs,
    ) -> tuple[Position[KeyType, ValueType], bool]:
        return self._core.insert(key, lambda: factory(*args, **kwargs))

    def at(self, key: KeyType) -> ValueType:
        position = self._core.find(key)
        if position.is_end:
            raise KeyNotFoundError(key)
        return position.entry.value

    def get(self, key: KeyType, default: ValueType | None = None) -> ValueType | None:
        position = self._core.find(key)
        return default if position.is_end else position.entry.value

    def __getitem__(self, key: KeyType) -> ValueType:
        position = self._core.find(key)
        if not position.is_end:
            return position.entry.value
        if self.default_factory is None:
            raise KeyNotFoundError(key)
        position, _ = self._core.insert(key, self.default_factory)
        return position.entry.value

    def __setitem__(self, key: KeyType, value: ValueType) -> None:
        position, inserted = self._core.insert(key, lambda: value)
        if not inserted:
            position.entry.value = value

    def __delitem__(self, key: KeyType) -> None:
        if not self._core.erase_key(key):
            raise KeyNotFoundError(key)

    def setdefault(self, key: KeyType, default: ValueType | None = None) -> ValueType | None:
        position, _ = self._core.insert(key, lambda: default)  # type: ignore[arg-type,return-value]
        return position.entry.value

    def pop(self, key: KeyType, default: Any = _MISSING) -> Any:  # noqa: ANN401
        position = self._core.find(key)
        if position.is_end:
            if default is _MISSING:
                raise KeyNotFoundError(key)
            return default
        value = position.entry.value
        self._core.erase_at(position)
        return value


class MultipleKeysMixin(OrderedInsertionContainer[KeyType, ValueType]):
    """Multimap semantics: every insert appends a new entry."""

    def insert(self, key: KeyType, value: ValueType) -> Position[KeyType, ValueType]:
        position, _ = self._core.insert(key, lambda: value)
        return position

    def get_all(self, key: KeyType) -> list[ValueType]:
        return [record.entry.value for record in self._core.index.equal_records(key)]


class InsertionMap(UniqueKeysMixin[KeyType, ValueType], SortedContainer[KeyType, ValueType]):
    def __init__(
        self,
        items: ItemsSource[KeyType, ValueType] | None = None,
        /,
        *,
        key_order: Callable[[KeyType], Any] | None = None,
        default_factory: Callable[[], ValueType] | None = None,
    ) -> None:
        super().__init__(OrderedInsertionCore(SortedKeyIndex(key_order), UniqueKeys()))
        self.default_factory = default_factory
        if items is not None:
            self.insert_many(items)

    def lower_bound(self, key: KeyType) -> Position[KeyType, ValueType]:
        return self._core.lower_bound(key)  # type: ignore[return-value]

    def upper_bound(self, key: KeyType) -> Position[KeyType, ValueType]:
        return self._core.upper_bound(key)  # type: ignore[return-value]

    def equal_range(self, key: KeyType) -> tuple[Position[KeyType, ValueType], Position[KeyType, ValueType]]:
        return self._core.equal_range(key)  # type: ignore[return-value]


class InsertionMultimap(MultipleKeysMixin[KeyType, ValueType], SortedContainer[KeyType, ValueType]):
    def __init__(
        self,
        items: ItemsSource[KeyType, ValueType] | None = None,
        /,
        *,
        key_order: Callable[[KeyType], Any] | None = None,
    ) -> None:
        super().__init__(OrderedInsertionCore(SortedKeyIndex(key_order), MultipleKeys()))
        if items is not None:
            self.insert_many(items)

    def lower_bound(self, key: KeyType) -> IndexPosition[KeyType, ValueType]:
        return self._core.lower_bound(key)  # type: ignore[return-value]

    def upper_bound(self, key: KeyType) -> IndexPosition[KeyType, ValueType]:
        return self._core.upper_bound(key)  # type: ignore[return-value]

    def equal_range(
        self, key: KeyType
    ) -> tuple[IndexPosition[KeyType, ValueType], IndexPosition[KeyType, ValueType]]:
        return self._core.equal_range(key)  # type: ignore[return-value]


class InsertionHashMap(UniqueKeysMixin[KeyType, ValueType], HashedContainer[KeyType, ValueType]):
    def __init__(
        self,
        items: ItemsSource[KeyType, ValueType] | None = None,
        /,
        *,
        hash_function: Callable[[KeyType], int] = hash,
        key_equal: Callable[[KeyType, KeyType], bool] = operator.eq,
        configurations: Configurations | None = None,
        default_factory: Callable[[], ValueType] | None = None,
    ) -> None:
        super().__init__(
            OrderedInsertionCore(HashedKeyIndex(hash_function, key_equal, configurations), UniqueKeys())
        )
        self.default_factory = default_factory
        if items is not None:
            self.insert_many(items)

    def equal_range(self, key: KeyType) -> tuple[Position[KeyType, ValueType], Position[KeyType, ValueType]]:
        return self._core.equal_range(key)  # type: ignore[return-value]


class InsertionHashMultimap(MultipleKeysMixin[KeyType, ValueType], HashedContainer[KeyType, ValueType]):
    def __init__(
        self,
        items: ItemsSource[KeyType, ValueType] | None = None,
        /,
        *,
        hash_function: Callable[[KeyType], int] = hash,
        key_equal: Callable[[KeyType, KeyType], bool] = operator.eq,
        configurations: Configurations | None = None,
    ) -> None:
        super().__init__(
            OrderedInsertionCore(HashedKeyIndex(hash_function, key_equal, configurations), MultipleKeys())
        )
        if items is not None:
            self.insert_many(items)

    def equal_range(
        self, key: KeyType
    ) -> tuple[IndexPosition[KeyType, ValueType], IndexPosition[KeyType, ValueType]]:
        return self._core.equal_range(key)  # type: ignore[return-value]
