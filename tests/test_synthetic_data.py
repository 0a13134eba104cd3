# test_synthetic_data.py

import numpy as np
import pytest

from kmeans_viz.synthetic_data import (
    _open_unit,
    gaussian_random,
    generate_points,
    mixture_cluster_count,
)


class ZeroFirstRng:
    """Returns the queued draws first, then 0.5 forever."""

    def __init__(self, draws):
        self.draws = list(draws)

    def random(self, size):
        out = []
        for _ in range(size):
            out.append(self.draws.pop(0) if self.draws else 0.5)
        return np.array(out, dtype=float)


def test_uniform_points_inside_bounds():
    X = generate_points("uniform", 1000, 800, 600, rng=0)
    assert X.shape == (1000, 2)
    assert np.all(X[:, 0] >= 0) and np.all(X[:, 0] < 800)
    assert np.all(X[:, 1] >= 0) and np.all(X[:, 1] < 600)


def test_gaussian_points_finite_and_centred():
    X = generate_points("gaussian", 1000, 800, 600, rng=1)
    assert X.shape == (1000, 2)
    assert np.all(np.isfinite(X))
    # std = 800/6 and 600/6, so the sample mean is within a few pixels
    assert abs(X[:, 0].mean() - 400) < 30
    assert abs(X[:, 1].mean() - 300) < 30
    assert X[:, 0].std() == pytest.approx(800 / 6, rel=0.15)


@pytest.mark.parametrize("count", [10, 59, 200, 1000])
def test_mixture_points_finite(count):
    X = generate_points("clusters", count, 800, 600, rng=2)
    assert X.shape == (count, 2)
    assert np.all(np.isfinite(X))


@pytest.mark.parametrize("count,expected", [
    (10, 2), (59, 2), (60, 2), (90, 3), (120, 4), (150, 5), (1000, 5),
])
def test_mixture_cluster_count(count, expected):
    assert mixture_cluster_count(count) == expected


def test_open_unit_redraws_exact_zero():
    rng = ZeroFirstRng([0.0, 0.25, 0.0, 0.75])
    u = _open_unit(rng, 2)
    assert np.all(u > 0)
    assert u[1] == 0.25


def test_gaussian_random_never_takes_log_of_zero():
    rng = ZeroFirstRng([0.0, 0.0, 0.0])
    z = gaussian_random(rng, 10.0, 2.0, 3)
    assert np.all(np.isfinite(z))


def test_seeded_generation_is_reproducible():
    a = generate_points("clusters", 100, 800, 600, rng=42)
    b = generate_points("clusters", 100, 800, 600, rng=42)
    np.testing.assert_array_equal(a, b)


def test_unknown_method_raises():
    with pytest.raises(ValueError):
        generate_points("spiral", 100, 800, 600)
