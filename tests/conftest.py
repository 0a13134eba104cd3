import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
from sklearn.datasets import make_blobs


class FakeTimer:
    """Stands in for a matplotlib canvas timer; fire() delivers one tick."""

    def __init__(self, interval):
        self.interval = interval
        self.callbacks = []
        self.started = False
        self.stop_calls = 0

    def add_callback(self, fn):
        self.callbacks.append(fn)

    def start(self):
        self.started = True

    def stop(self):
        self.started = False
        self.stop_calls += 1

    def fire(self):
        for fn in list(self.callbacks):
            fn()


@pytest.fixture
def timers():
    """Timer factory that remembers every timer it handed out."""
    created = []

    def factory(interval):
        timer = FakeTimer(interval)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def blob_data():
    """
    Three tight, well separated blobs inside an 800x600 canvas.
    """
    X, _ = make_blobs(
        n_samples=60,
        centers=[[150, 150], [400, 450], [650, 150]],
        cluster_std=10.0,
        random_state=0
    )
    return X


@pytest.fixture
def uniform_data():
    rng = np.random.default_rng(7)
    return np.column_stack([rng.uniform(0, 800, 30), rng.uniform(0, 600, 30)])
