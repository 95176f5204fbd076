import random

import pytest

from pyoimap.maps import InsertionHashMap, InsertionHashMultimap, InsertionMap, InsertionMultimap
from pyoimap.positions import IndexIterator

KEYS = list(range(12))


def run_operations(container, seed, steps=300):
    generator = random.Random(seed)
    expected = []
    for step in range(steps):
        key = generator.choice(KEYS)
        operation = generator.random()
        if operation < 0.6:
            container.insert(key, step)
            if container.count(key) > sum(1 for k, _ in expected if k == key):
                expected.append((key, step))
        elif operation < 0.8:
            container.erase(key)
            expected = [(k, v) for k, v in expected if k != key]
        elif len(container):
            position = container.begin()
            for _ in range(generator.randrange(len(container))):
                position = position.next()
            del expected[[v for _, v in expected].index(position.value)]
            container.erase_at(position)
        container.verify_consistency()
    return expected


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("container_class", [InsertionMap, InsertionHashMap])
def test_unique_containers_follow_a_reference_model(container_class, seed):
    container = container_class()
    expected = run_operations(container, seed)
    assert list(container.items()) == expected
    for key in KEYS:
        assert container.count(key) <= 1
        if container.find(key) != container.end():
            first, last = container.equal_range(key)
            assert first.key == key
            assert first.next() == last


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("container_class", [InsertionMultimap, InsertionHashMultimap])
def test_multi_containers_follow_a_reference_model(container_class, seed):
    container = container_class()
    expected = run_operations(container, seed)
    assert list(container.items()) == expected
    for key in KEYS:
        peers = [value for k, value in expected if k == key]
        assert container.count(key) == len(peers)
        first, last = container.equal_range(key)
        assert [value for _, value in IndexIterator(first, last)] == peers


@pytest.mark.parametrize("container_class", [InsertionMap, InsertionMultimap, InsertionHashMap, InsertionHashMultimap])
def test_insertion_order_without_erases(container_class):
    generator = random.Random(7)
    keys = [generator.randrange(1000) for _ in range(200)]
    container = container_class()
    for value, key in enumerate(keys):
        container.insert(key, value)
    seen = set()
    expected = []
    for value, key in enumerate(keys):
        if container_class in (InsertionMultimap, InsertionHashMultimap) or key not in seen:
            expected.append((key, value))
        seen.add(key)
    assert list(container.items()) == expected


@pytest.mark.parametrize("container_class", [InsertionMap, InsertionMultimap, InsertionHashMap, InsertionHashMultimap])
def test_splice_changes_only_relative_order(container_class):
    generator = random.Random(11)
    container = container_class([(generator.randrange(20), value) for value in range(50)])
    before = {key: container.find(key) for key in range(20)}
    members = sorted(container.items())
    for _ in range(30):
        positions = []
        position = container.begin()
        while position != container.end():
            positions.append(position)
            position = position.next()
        first_offset = generator.randrange(len(positions))
        last_offset = generator.randrange(first_offset, len(positions) + 1)
        choices = positions[:first_offset] + positions[last_offset:] + [container.end()]
        last = positions[last_offset] if last_offset < len(positions) else container.end()
        container.splice(generator.choice(choices), positions[first_offset], last)
    assert sorted(container.items()) == members
    assert {key: container.find(key) for key in range(20)} == before
    container.verify_consistency()


def test_erase_then_find_round_trip(unique_class):
    container = unique_class([(key, key) for key in KEYS])
    for key in KEYS:
        container.erase_at(container.find(key))
        assert container.find(key) == container.end()
    assert not container
