"""
Shared fixtures for the clustering tests.
"""

import numpy as np
import pytest


@pytest.fixture
def two_blobs_with_noise() -> np.ndarray:
    """Four points near (1, 2), two near (-2, 3), two isolated points."""
    return np.array([
        [1.0, 2.0], [1.1, 2.2], [0.9, 1.9], [1.0, 2.1],
        [-2.0, 3.0], [-2.2, 3.1],
        [-1.0, -2.0], [-2.0, -1.0],
    ])


@pytest.fixture
def two_blobs(two_blobs_with_noise) -> np.ndarray:
    return two_blobs_with_noise[:6]


@pytest.fixture
def chain_1d() -> np.ndarray:
    """Dense core 2.0..2.2 with one border point on each side."""
    return np.array([[1.55], [2.0], [2.1], [2.2], [2.65]])


@pytest.fixture
def random_blobs() -> np.ndarray:
    """Three gaussian blobs plus uniform background noise, fixed seed."""
    rng = np.random.default_rng(7)
    blobs = [
        rng.normal(loc=center, scale=0.3, size=(40, 2))
        for center in ([0.0, 0.0], [5.0, 5.0], [0.0, 6.0])
    ]
    noise = rng.uniform(-3, 9, size=(20, 2))
    return np.vstack(blobs + [noise])


@pytest.fixture
def separated_kmeans_data() -> np.ndarray:
    return np.array([
        [59.59375, 270.6875], [51.59375, 307.6875], [86.59375, 286.6875],
        [319.59375, 145.6875], [314.59375, 174.6875], [350.59375, 161.6875],
    ])
