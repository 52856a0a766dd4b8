"""Unit tests for WeakValueDictionary.

Tests cover:
1. Slot lifecycle: add, dead, re-add, remove
2. count vs active_count after collection
3. Generation sentinel semantics
4. Interpreter-backed collection scenario (ID1..ID5)
"""

import gc
import pickle

import pytest

from utilkit.collections import WeakValueDictionary, DEAD_GENERATION
from utilkit.core.errors import InvalidArgumentError
from tests.weak_fixtures import Payload


KEYS = [f"ID{i}" for i in range(1, 6)]


@pytest.fixture
def cache(manual_memory):
    """Dictionary on the deterministic memory manager."""
    return WeakValueDictionary[str, Payload](memory=manual_memory)


# =============================================================================
# Scenario
# =============================================================================

@pytest.mark.unit
@pytest.mark.invariant
class TestCollectionScenario:
    """Five keys, collect everything, resurrect by replacement."""

    def test_five_key_scenario_manual(self, cache, manual_memory):
        for index, key in enumerate(KEYS, start=1):
            cache.add(key, manual_memory.retain(Payload(index, 1, key)))

        assert cache.count == 5
        assert cache.active_count == 5
        for key in KEYS:
            assert cache.get_generation(key) == 0

        manual_memory.release_all()
        manual_memory.collect()

        assert cache.count == 5
        assert cache.active_count == 0
        for key in KEYS:
            assert cache.get_generation(key) == DEAD_GENERATION

        for index, key in enumerate(KEYS, start=1):
            cache.add(key, manual_memory.retain(Payload(index, 2, key)))

        assert cache.is_alive("ID1")
        assert cache.get_generation("ID1") == 0
        assert cache.count == 5
        assert cache.active_count == 5

    def test_generation_ages_with_survived_cycles(self, cache, manual_memory):
        keeper = manual_memory.retain(Payload(1, 1, "ID1"))
        cache.add("ID1", keeper)
        cache.add("ID2", Payload(2, 1, "ID2"))

        manual_memory.collect()
        assert cache.get_generation("ID1") == 1
        assert cache.get_generation("ID2") == DEAD_GENERATION

        manual_memory.collect()
        manual_memory.collect()
        assert cache.get_generation("ID1") == manual_memory.max_generation

    def test_partial_collection_keeps_odd_keys(self, cache, manual_memory):
        values = {key: Payload(i, 1, key) for i, key in enumerate(KEYS, start=1)}
        for key in KEYS:
            cache.add(key, values[key])
        for key in ("ID1", "ID3", "ID5"):
            manual_memory.retain(values[key])

        manual_memory.collect()

        assert cache.count == 5
        assert cache.active_count == 3
        assert [key for key, _ in cache.alive_items()] == ["ID1", "ID3", "ID5"]
        assert cache.get_value("ID2") is None

    @pytest.mark.gc
    def test_five_key_scenario_interpreter(self, cpython_memory, collect, gc_paused):
        cache = WeakValueDictionary[str, Payload](memory=cpython_memory)
        values = [Payload(i, 1, key) for i, key in enumerate(KEYS, start=1)]
        for index in range(len(KEYS)):
            cache.add(KEYS[index], values[index])

        assert cache.count == 5
        assert cache.active_count == 5
        for key in KEYS:
            assert cache.get_generation(key) == 0

        del values
        collect()

        assert cache.count == 5
        assert cache.active_count == 0
        assert cache.get_generation("ID1") == DEAD_GENERATION

        fresh = Payload(1, 2, "ID1")
        cache.add("ID1", fresh)

        assert cache.is_alive("ID1")
        assert cache.get_generation("ID1") == 0
        assert cache.active_count == 1


# =============================================================================
# Queries
# =============================================================================

@pytest.mark.unit
class TestQueries:
    """Tests for get_value, is_alive, get_generation."""

    def test_live_value_returned_exactly(self, cache):
        value = Payload(1)
        cache.add("k", value)

        assert cache.is_alive("k")
        assert cache.get_value("k") is value

    def test_unknown_key_is_not_found(self, cache):
        assert cache.get_value("nope") is None
        assert cache.get_value("nope", "fallback") == "fallback"
        assert cache.is_alive("nope") is False
        assert cache.get_generation("nope") == DEAD_GENERATION

    def test_none_key_is_not_found(self, cache):
        assert cache.get_value(None) is None
        assert cache.is_alive(None) is False
        assert cache.get_generation(None) == DEAD_GENERATION
        assert None not in cache

    def test_generation_sentinel_iff_dead(self, cache, manual_memory):
        alive, doomed = Payload(1), Payload(2)
        cache.add("alive", alive)
        cache.add("doomed", doomed)
        manual_memory.expire(doomed)

        for key in ("alive", "doomed", "never-added"):
            assert (cache.get_generation(key) == DEAD_GENERATION) == (not cache.is_alive(key))

    @pytest.mark.gc
    def test_interpreter_generation_reads_counters_only(self, cpython_memory, gc_paused, monkeypatch):
        cache = WeakValueDictionary[str, Payload](memory=cpython_memory)
        value = Payload(1)
        cache.add("k", value)
        gc.collect()
        gc.collect()

        def walk_heap(*args, **kwargs):
            raise AssertionError("gc.get_objects() called")

        monkeypatch.setattr(gc, "get_objects", walk_heap)

        assert cache.get_generation("k") == len(gc.get_stats()) - 1

    def test_contains_reports_slots_not_liveness(self, cache, manual_memory):
        value = Payload(1)
        cache.add("k", value)
        manual_memory.expire(value)

        assert "k" in cache
        assert not cache.is_alive("k")
        assert cache.keys() == ["k"]


# =============================================================================
# Mutation
# =============================================================================

@pytest.mark.unit
class TestMutation:
    """Tests for add, remove, clear and scavenge."""

    def test_add_none_value_rejected(self, cache):
        with pytest.raises(InvalidArgumentError):
            cache.add("k", None)
        assert cache.count == 0

    def test_add_none_key_rejected(self, cache):
        with pytest.raises(InvalidArgumentError):
            cache.add(None, Payload(1))

    def test_readd_replaces_handle(self, cache, manual_memory):
        first = Payload(1)
        cache.add("k", first)
        manual_memory.expire(first)
        assert not cache.is_alive("k")

        second = Payload(2)
        cache.add("k", second)

        assert cache.is_alive("k")
        assert cache.get_value("k") is second
        assert cache.count == 1

    def test_readd_live_slot(self, cache):
        first, second = Payload(1), Payload(2)
        cache.add("k", first)
        cache.add("k", second)

        assert cache.get_value("k") is second
        assert cache.count == 1

    def test_remove_alive_slot(self, cache):
        cache.add("k", Payload(1))

        assert cache.remove("k") is True
        assert cache.count == 0
        assert cache.active_count == 0
        assert cache.get_generation("k") == DEAD_GENERATION

    def test_remove_dead_slot(self, cache, manual_memory):
        value = Payload(1)
        cache.add("k", value)
        manual_memory.expire(value)

        assert cache.remove("k") is True
        assert cache.count == 0

    def test_remove_unknown_key(self, cache):
        assert cache.remove("nope") is False
        assert cache.remove(None) is False

    def test_clear(self, cache):
        for key in KEYS:
            cache.add(key, Payload())
        cache.clear()

        assert cache.count == 0
        assert len(cache) == 0

    def test_scavenge_drops_dead_slots(self, cache, manual_memory):
        keeper = manual_memory.retain(Payload(1))
        cache.add("keep", keeper)
        cache.add("drop", Payload(2))
        manual_memory.collect()

        assert cache.count == 2
        assert cache.scavenge() == 1
        assert cache.keys() == ["keep"]
        assert cache.scavenge() == 0

    def test_active_never_exceeds_count(self, cache, manual_memory):
        values = [Payload(i) for i in range(5)]
        for index, key in enumerate(KEYS):
            cache.add(key, values[index])
            assert cache.active_count <= cache.count

        manual_memory.expire(values[0])
        cache.remove("ID5")
        stats = cache.stats()

        assert stats.active_count <= stats.count
        assert stats.to_dict() == {'count': 4, 'active_count': 3, 'dead_count': 1}


# =============================================================================
# Serialization
# =============================================================================

@pytest.mark.unit
class TestPickling:
    """Tests for persisting dictionaries with dead slots."""

    @pytest.mark.gc
    def test_pickle_with_dead_slot(self, cpython_memory, collect):
        cache = WeakValueDictionary(memory=cpython_memory)
        value = Payload(1)
        cache.add("k", value)
        del value
        collect()

        restored = pickle.loads(pickle.dumps(cache))

        assert restored.count == 1
        assert "k" in restored
        assert restored.is_alive("k") is False

    def test_pickle_with_live_value_in_graph(self, cpython_memory):
        cache = WeakValueDictionary(memory=cpython_memory)
        value = Payload(5, 1, "k")
        cache.add("k", value)

        restored_value, restored_cache = pickle.loads(pickle.dumps((value, cache)))

        assert restored_cache.get_value("k") is restored_value
