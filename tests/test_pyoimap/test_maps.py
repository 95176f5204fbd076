import copy

import pytest

from pyoimap.errors import EndPositionError, InvalidPositionError, KeyNotFoundError
from pyoimap.maps import InsertionHashMap, InsertionMap, InsertionMultimap
from pyoimap.positions import SequenceIterator


def test_first_insert_wins(unique_class):
    container = unique_class()
    position, inserted = container.insert("a", 1)
    assert inserted
    assert position.item == ("a", 1)
    container.insert("b", 2)
    position, inserted = container.insert("a", 3)
    assert not inserted
    assert position.item == ("a", 1)
    assert len(container) == 2
    assert list(container.items()) == [("a", 1), ("b", 2)]
    assert container.at("a") == 1


def test_erase_by_key(unique_class):
    container = unique_class([("a", 1), ("b", 2)])
    a_position = container.find("a")
    assert container.erase("b") == 1
    assert container.erase("b") == 0
    assert len(container) == 1
    assert container.find("b") == container.end()
    assert container.find("a") == a_position
    assert a_position.value == 1


def test_construct_from_pairs(unique_class):
    container = unique_class([("x", 1), ("y", 2), ("x", 3)])
    assert len(container) == 2
    assert container["x"] == 1


def test_construct_from_mapping_and_container(unique_class):
    container = unique_class({"b": 1, "a": 2})
    assert list(container) == ["b", "a"]
    assert list(unique_class(container).items()) == [("b", 1), ("a", 2)]


def test_at_missing_key(unique_class):
    container = unique_class([("a", 1)])
    with pytest.raises(KeyNotFoundError) as error:
        container.at("b")
    assert error.value.key == "b"
    assert isinstance(error.value, KeyError)
    assert len(container) == 1


def test_getitem_without_default_factory(unique_class):
    container = unique_class()
    with pytest.raises(KeyError):
        container["a"]
    assert len(container) == 0


def test_getitem_inserts_default(unique_class):
    container = unique_class([("a", [1])], default_factory=list)
    container["b"].append(2)
    container["a"].append(3)
    assert list(container.items()) == [("a", [1, 3]), ("b", [2])]


def test_setitem_overwrites_in_place(unique_class):
    container = unique_class([("a", 1), ("b", 2)])
    container["a"] = 10
    container["c"] = 3
    assert list(container.items()) == [("a", 10), ("b", 2), ("c", 3)]


def test_delitem(unique_class):
    container = unique_class([("a", 1)])
    del container["a"]
    assert not container
    with pytest.raises(KeyNotFoundError):
        del container["a"]


def test_mapping_helpers(unique_class):
    container = unique_class([("a", 1)])
    assert container.get("a") == 1
    assert container.get("b") is None
    assert container.get("b", 5) == 5
    assert "b" not in container
    assert container.setdefault("b", 2) == 2
    assert container.setdefault("b", 3) == 2
    assert container.pop("a") == 1
    assert container.pop("a", None) is None
    with pytest.raises(KeyNotFoundError):
        container.pop("a")
    assert list(container.items()) == [("b", 2)]


def test_emplace_only_builds_missing_values(unique_class):
    calls = []

    def build(value):
        calls.append(value)
        return value

    container = unique_class()
    _, inserted = container.emplace("a", build, 1)
    assert inserted
    _, inserted = container.emplace("a", build, 2)
    assert not inserted
    assert calls == [1]
    assert container["a"] == 1


def test_views_and_reversal(unique_class):
    container = unique_class([("b", 1), ("a", 2), ("c", 3)])
    assert list(container.keys()) == ["b", "a", "c"]
    assert list(container.values()) == [1, 2, 3]
    assert list(reversed(container)) == ["c", "a", "b"]
    assert list(container.reversed_items()) == [("c", 3), ("a", 2), ("b", 1)]


def test_popitem(unique_class):
    container = unique_class([("a", 1), ("b", 2), ("c", 3)])
    assert container.popitem() == ("c", 3)
    assert container.popitem(last=False) == ("a", 1)
    assert list(container) == ["b"]
    container.clear()
    with pytest.raises(KeyError):
        container.popitem()


def test_equal_range_is_in_sequence_order(unique_class):
    container = unique_class([("b", 1), ("a", 2), ("c", 3)])
    first, last = container.equal_range("a")
    assert first == container.find("a")
    assert last == container.find("c")
    assert list(SequenceIterator(first, last)) == [("a", 2)]
    missing_first, missing_last = container.equal_range("z")
    assert missing_first == missing_last == container.end()


def test_erase_at_returns_next_position(unique_class):
    container = unique_class([("a", 1), ("b", 2), ("c", 3)])
    following = container.erase_at(container.find("b"))
    assert following.key == "c"
    assert list(container) == ["a", "c"]
    assert container.erase_at(container.find("c")) == container.end()
    with pytest.raises(EndPositionError):
        container.erase_at(container.end())
    container.verify_consistency()


def test_erase_at_index_position(unique_class):
    container = unique_class([("a", 1), ("b", 2)])
    index_position = container.find("a").to_index_position()
    container.erase_at(index_position)
    assert list(container) == ["b"]
    container.verify_consistency()


def test_erase_range(unique_class):
    container = unique_class([(key, index) for index, key in enumerate("abcde")])
    last = container.erase_range(container.find("b"), container.find("e"))
    assert last == container.find("e")
    assert list(container) == ["a", "e"]
    container.verify_consistency()


def test_erase_range_out_of_order_leaves_container_untouched(unique_class):
    container = unique_class([(key, index) for index, key in enumerate("abcd")])
    with pytest.raises(InvalidPositionError):
        container.erase_range(container.find("c"), container.find("b"))
    assert list(container) == ["a", "b", "c", "d"]
    container.verify_consistency()


def test_erase_at_rejects_foreign_positions(unique_class):
    container = unique_class([("a", 1)])
    other = unique_class([("a", 1)])
    with pytest.raises(InvalidPositionError):
        container.erase_at(other.begin())
    assert len(other) == 1


def test_splice_keeps_lookups(unique_class):
    container = unique_class([(key, index) for index, key in enumerate("abcde")])
    positions = {key: container.find(key) for key in "abcde"}
    container.splice(container.begin(), container.find("d"), container.end())
    assert list(container) == ["d", "e", "a", "b", "c"]
    assert {key: container.find(key) for key in "abcde"} == positions
    container.splice(container.end(), container.find("d"))
    assert list(container) == ["e", "a", "b", "c", "d"]
    assert len(container) == 5
    container.verify_consistency()


def test_splice_rejects_destination_inside_range(unique_class):
    container = unique_class([(key, index) for index, key in enumerate("abcd")])
    with pytest.raises(InvalidPositionError):
        container.splice(container.find("b"), container.find("a"), container.find("d"))
    with pytest.raises(InvalidPositionError):
        container.splice(container.find("a"), container.find("c"), container.find("b"))
    assert list(container) == ["a", "b", "c", "d"]


def test_swap(unique_class):
    left = unique_class([("a", 1)])
    right = unique_class([("b", 2), ("c", 3)])
    position = left.find("a")
    left.swap(right)
    assert list(left) == ["b", "c"]
    assert list(right) == ["a"]
    assert right.find("a") == position
    with pytest.raises(TypeError):
        left.swap(InsertionMultimap())


def test_take_moves_everything(unique_class):
    container = unique_class([("a", 1), ("b", 2)], default_factory=int)
    position = container.find("b")
    moved = container.take()
    assert type(moved) is unique_class
    assert list(moved.items()) == [("a", 1), ("b", 2)]
    assert moved.find("b") == position
    assert len(container) == 0
    assert container["z"] == 0
    assert moved["y"] == 0


def test_copy_is_independent(unique_class):
    container = unique_class([("a", [1]), ("b", [2])])
    shallow = copy.copy(container)
    deep = copy.deepcopy(container)
    container["c"] = [3]
    container["a"].append(10)
    assert list(shallow) == ["a", "b"]
    assert shallow["a"] == [1, 10]
    assert deep["a"] == [1]
    assert shallow.find("a") != container.find("a")
    shallow.verify_consistency()
    deep.verify_consistency()


def test_equality(unique_class):
    assert unique_class([("a", 1), ("b", 2)]) == unique_class([("a", 1), ("b", 2)])
    assert unique_class([("a", 1), ("b", 2)]) != unique_class([("b", 2), ("a", 1)])
    assert unique_class([("a", 1)]) != {"a": 1}


def test_repr(unique_class):
    assert repr(unique_class([("a", 1)])) == f"{unique_class.__name__}([('a', 1)])"


def test_failed_insert_leaves_no_trace():
    container = InsertionMap([(1, "one")])
    with pytest.raises(TypeError):
        container.insert("two", 2)
    assert list(container.items()) == [(1, "one")]
    container.verify_consistency()


def test_unhashable_key_in_hashed_map():
    container = InsertionHashMap()
    with pytest.raises(TypeError):
        container.insert([], 1)
    assert len(container) == 0


class TestSortedMap:
    def test_bounds_return_sequence_positions(self):
        container = InsertionMap([(30, "c"), (10, "a"), (20, "b")])
        assert container.lower_bound(15).key == 20
        assert container.upper_bound(20).key == 30
        assert container.lower_bound(10).key == 10
        assert container.upper_bound(30) == container.end()

    def test_index_items_follow_key_order(self):
        container = InsertionMap([(30, "c"), (10, "a"), (20, "b")])
        assert list(container.index_items()) == [(10, "a"), (20, "b"), (30, "c")]
        assert list(container.reversed_index_items()) == [(30, "c"), (20, "b"), (10, "a")]
        assert list(container.items()) == [(30, "c"), (10, "a"), (20, "b")]

    def test_key_order_and_comparators(self):
        container = InsertionMap([("b", 1), ("A", 2)], key_order=str.lower)
        assert container.key_order is str.lower
        assert list(container.index_items()) == [("A", 2), ("b", 1)]
        assert "a" in container
        assert container.key_comp()("a", "B")
        assert container.value_comp()(("a", 5), ("B", 1))
        assert not container.value_comp()(("B", 1), ("a", 5))


class TestHashedMap:
    def test_bucket_introspection(self, small_configurations):
        container = InsertionHashMap([(key, key * 10) for key in range(5)], configurations=small_configurations)
        assert container.configurations is small_configurations
        assert container.bucket_count == 8
        assert container.load_factor == 5 / 8
        assert container.bucket(3) == 3
        assert container.bucket_size(3) == 1
        assert list(container.iter_bucket(3)) == [(3, 30)]
        assert list(container.items()) == [(key, key * 10) for key in range(5)]

    def test_rehash_and_reserve_keep_sequence_order(self):
        container = InsertionHashMap([(key, None) for key in "qwerty"])
        container.rehash(64)
        assert container.bucket_count == 64
        container.reserve(1000)
        assert container.bucket_count == 1000
        assert list(container) == list("qwerty")
        container.verify_consistency()

    def test_max_load_factor(self):
        container = InsertionHashMap([(key, None) for key in range(8)])
        container.max_load_factor = 0.25
        assert container.max_load_factor == 0.25
        assert container.bucket_count == 32

    def test_custom_hash_and_equality(self):
        container = InsertionHashMap(
            hash_function=lambda key: hash(key.lower()), key_equal=lambda left, right: left.lower() == right.lower()
        )
        container.insert("Key", 1)
        _, inserted = container.insert("KEY", 2)
        assert not inserted
        assert container["key"] == 1
        assert container.key_equal("a", "A")
        assert container.hash_function("A") == hash("a")
