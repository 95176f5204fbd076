from __future__ import annotations

from enum import StrEnum


class Variant(StrEnum):
    MAP = "map"
    MULTIMAP = "multimap"
    HASH_MAP = "hash-map"
    HASH_MULTIMAP = "hash-multimap"

    @property
    def is_multi(self) -> bool:
        return self in (Variant.MULTIMAP, Variant.HASH_MULTIMAP)

    @property
    def is_hashed(self) -> bool:
        return self in (Variant.HASH_MAP, Variant.HASH_MULTIMAP)


class Order(StrEnum):
    SEQUENCE = "sequence"
    INDEX = "index"
