"""
Density criterion for windowed motion-state clustering.

Every update re-evaluates the whole pool from the cached distance matrix:
a point with enough eps-neighbours is stationary, and so is each of its
neighbours. Nothing carries over between updates.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def density_threshold(delta: float, pool_size: int) -> int:
    """
    Neighbours a point needs to be stationary.

    delta * pool_size is truncated, so small pools need proportionally
    fewer neighbours.
    """
    return int(delta * pool_size)


def neighbor_mask(distances: np.ndarray, eps: float) -> np.ndarray:
    """
    Boolean mask of neighbour edges: 0 < d < eps.

    SENTINEL (-1) and zero distances are never edges.
    """
    return (distances > 0.0) & (distances < eps)


def count_neighbors(distances: np.ndarray, eps: float) -> np.ndarray:
    """Neighbour count per row of a pool distance matrix."""
    return neighbor_mask(distances, eps).sum(axis=1)


def mark_stationary(distances: np.ndarray, eps: float, delta: float) -> np.ndarray:
    """
    Run one density pass over the pool.

    Args:
        distances: Square pool x pool distance matrix (pool order)
        eps: Neighbour distance threshold
        delta: Minimum neighbour fraction of the pool

    Returns:
        Boolean array in pool order, True where stationary
    """
    pool_size = len(distances)

    # A lone point has nothing to cluster with
    if pool_size <= 1:
        return np.zeros(pool_size, dtype=bool)

    edges = neighbor_mask(distances, eps)

    # Core points: enough neighbours within eps
    core = edges.sum(axis=1) >= density_threshold(delta, pool_size)

    # Core points plus everything adjacent to any core point
    return core | edges[core].any(axis=0)


def tally_votes(stationary: Sequence[bool]) -> tuple[int, int]:
    """
    Aggregate the per-point decision into a motion vote.

    Stationary points vote -1, moving points +1.

    Returns:
        (vote, stationary_count)
    """
    vote = 0
    stationary_count = 0
    for is_stationary in stationary:
        if is_stationary:
            vote -= 1
            stationary_count += 1
        else:
            vote += 1
    return vote, stationary_count
