"""
Test window_store.py functionality
"""

import numpy as np
import pytest

from motionstate.config import ClustererConfig
from motionstate.core.observation import VectorObservation
from motionstate.core.window_store import (
    ObservationWindowStore,
    TimestampOrderError,
    SENTINEL,
)


class CountingObservation(VectorObservation):
    """VectorObservation that counts distance computations."""

    __slots__ = ('calls',)

    def __init__(self, x, eps=1.0):
        super().__init__([x], eps)
        self.calls = 0

    def distance_from(self, other):
        self.calls += 1
        return super().distance_from(other)


def make_store(window_length=4, capacity=None, time_based=False):
    config = ClustererConfig(
        time_based_window=time_based,
        window_length=window_length,
        capacity=capacity,
        delta=0.5,
    )
    return ObservationWindowStore(config)


def push(store, t, x, eps=1.0):
    """Evict then insert, as the clusterer does."""
    evicted = store.evict_stale(t)
    slot = store.insert(t, VectorObservation([x], eps))
    return slot, evicted


def test_slots_allocated_lowest_first():
    """Fresh store hands out slots 0, 1, 2, ..."""
    store = make_store(window_length=4)
    slots = [push(store, float(t), float(t))[0] for t in range(4)]
    assert slots == [0, 1, 2, 3]
    print("  ✓ Slots allocated in order")


def test_lone_live_slot_is_not_reallocated():
    """A single live observation still owns its slot."""
    store = make_store(window_length=4)
    slot, _ = push(store, 0.0, 0.0)
    assert slot == 0
    assert store.allocate_slot() == 1
    assert store.distance(0, 0) == 0.0
    print("  ✓ Lone slot kept (diagonal holds self-distance)")


def test_evicted_slot_is_reused():
    """After the oldest entry is evicted, its slot is the next one used."""
    store = make_store(window_length=4)
    for t in range(4):
        push(store, float(t), float(t))

    slot, evicted = push(store, 4.0, 4.0)
    assert [e.slot for e in evicted] == [0]
    assert slot == 0
    assert store.live_slots() == [1, 2, 3, 0]
    print("  ✓ Evicted slot 0 reused")


def test_eviction_clears_row_and_column():
    store = make_store(window_length=3)
    for t in range(3):
        push(store, float(t), float(t))

    evicted = store.evict_stale(3.0)
    assert len(evicted) == 1
    s = evicted[0].slot

    matrix = store.distance_matrix()
    assert np.all(matrix[s, :] == SENTINEL)
    assert np.all(matrix[:, s] == SENTINEL)
    print(f"  ✓ Row/column {s} reset to sentinel")


def test_matrix_symmetric_after_many_updates():
    store = make_store(window_length=5)
    xs = [0.0, 3.5, 1.2, 7.7, 2.2, 9.1, 0.4, 5.5, 6.6, 1.1, 8.0, 4.4]
    for t, x in enumerate(xs):
        push(store, float(t), x)
        matrix = store.distance_matrix()
        assert np.array_equal(matrix, matrix.T), f"Asymmetric after t={t}"

    live = store.live_slots()
    for i in live:
        for j in live:
            assert store.distance(i, j) >= 0.0
    print(f"  ✓ Matrix symmetric across {len(xs)} updates")


def test_distances_cached_not_recomputed():
    """Each pair is compared exactly once while both are live."""
    store = make_store(window_length=10)
    observations = [CountingObservation(float(i)) for i in range(6)]
    for t, obs in enumerate(observations):
        store.evict_stale(float(t))
        store.insert(float(t), obs)

    total_calls = sum(obs.calls for obs in observations)
    assert total_calls == 6 * 5 // 2
    assert store.distance(0, 5) == pytest.approx(5.0)
    print(f"  ✓ {total_calls} distance computations for 6 observations")


def test_backwards_timestamp_rejected():
    store = make_store(window_length=4)
    push(store, 5.0, 0.0)

    with pytest.raises(TimestampOrderError):
        store.insert(4.0, VectorObservation([1.0], 1.0))

    assert store.pool_size() == 1
    assert store.allocate_slot() == 1
    print("  ✓ Backwards timestamp rejected without mutation")


def test_equal_timestamps_allowed():
    store = make_store(window_length=4)
    push(store, 1.0, 0.0)
    push(store, 1.0, 0.5)
    assert store.pool_size() == 2
    print("  ✓ Equal timestamps accepted")


def test_accessors_do_not_mutate():
    store = make_store(window_length=4)
    push(store, 0.0, 0.0)
    push(store, 1.0, 2.0)

    before = store.distance_matrix()
    for _ in range(3):
        assert store.pool_size() == 2
        assert store.capacity() == 4
        store.entries()
        store.live_slots()
    assert np.array_equal(before, store.distance_matrix())
    print("  ✓ Accessors are side-effect free")


def test_distance_matrix_is_read_only_copy():
    store = make_store(window_length=4)
    push(store, 0.0, 0.0)

    matrix = store.distance_matrix()
    with pytest.raises(ValueError):
        matrix[0, 1] = 3.0
    print("  ✓ distance_matrix() cannot be written through")


def test_restore_undoes_evict_and_insert():
    store = make_store(window_length=2)
    push(store, 0.0, 0.0)
    push(store, 1.0, 5.0)
    saved = store.snapshot()
    matrix_before = store.distance_matrix()

    slot, evicted = push(store, 2.0, 5.5)
    assert [e.timestamp for e in evicted] == [0.0]
    assert slot == 0

    store.restore(saved)
    assert [e.timestamp for e in store.entries()] == [0.0, 1.0]
    assert np.array_equal(store.distance_matrix(), matrix_before)
    assert store.observation(0).values[0] == 0.0

    # Restored state keeps working
    slot, _ = push(store, 2.0, 5.5)
    assert slot == 0
    assert store.distance(0, 1) == pytest.approx(0.5)
    print("  ✓ Snapshot restores window state")


def run_all_tests():
    """Run all window store tests."""
    print("=" * 60)
    print("WINDOW STORE VALIDATION")
    print("=" * 60)
    print()

    test_slots_allocated_lowest_first()
    test_lone_live_slot_is_not_reallocated()
    test_evicted_slot_is_reused()
    test_eviction_clears_row_and_column()
    test_matrix_symmetric_after_many_updates()
    test_distances_cached_not_recomputed()
    test_backwards_timestamp_rejected()
    test_equal_timestamps_allowed()
    test_accessors_do_not_mutate()
    test_distance_matrix_is_read_only_copy()
    test_restore_undoes_evict_and_insert()

    print()
    print("=" * 60)
    print("✅ ALL WINDOW STORE TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
