# synthetic_data.py

import logging

import numpy as np

logger = logging.getLogger(__name__)


def _open_unit(rng, size):
    """
    Uniform draws on the open interval (0, 1).
    Exact zeros are redrawn so that log(u) stays finite.
    """
    u = rng.random(size)
    zeros = u == 0.0
    while zeros.any():
        u[zeros] = rng.random(int(zeros.sum()))
        zeros = u == 0.0
    return u


def gaussian_random(rng, mean, stddev, size):
    """
    Box-Muller transform: two independent U(0,1) draws -> one N(mean, stddev).
    """
    u = _open_unit(rng, size)
    v = _open_unit(rng, size)
    z = np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)
    return mean + z * stddev


def mixture_cluster_count(count):
    """Number of mixture components for `count` points: floor(count/30) in [2, 5]."""
    return int(min(5, max(2, count // 30)))


def generate_points(method, count, width, height, rng=None):
    """
    Draw `count` 2D points inside a width x height canvas.

      - uniform  : x ~ U[0, width), y ~ U[0, height)
      - gaussian : one isotropic blob at the canvas centre, std = dimension / 6
      - clusters : 2-5 random centres, each point sampled around one of them
                   with std = dimension / 15

    `count` is not validated here; callers clamp it first.
    Returns X (count, 2).
    """
    rng = np.random.default_rng(rng)
    count = int(count)

    if method == "uniform":
        xs = rng.uniform(0.0, width, size=count)
        ys = rng.uniform(0.0, height, size=count)

    elif method == "gaussian":
        xs = gaussian_random(rng, width / 2, width / 6, count)
        ys = gaussian_random(rng, height / 2, height / 6, count)

    elif method == "clusters":
        n_centers = mixture_cluster_count(count)
        centers = np.column_stack([
            rng.uniform(0.0, width, size=n_centers),
            rng.uniform(0.0, height, size=n_centers),
        ])
        picks = rng.integers(0, n_centers, size=count)
        xs = gaussian_random(rng, centers[picks, 0], width / 15, count)
        ys = gaussian_random(rng, centers[picks, 1], height / 15, count)

    else:
        raise ValueError(f"Unknown data method: {method!r}")

    X = np.column_stack([xs, ys]).astype(float)
    logger.info("Generated %d %s points in %gx%g", count, method, width, height)
    return X
