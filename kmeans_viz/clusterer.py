import copy
import logging
from collections import namedtuple
from enum import Enum

import numpy as np
import pandas as pd

from kmeans_viz.metrics import compute_all_metrics, compute_inertia

logger = logging.getLogger(__name__)

UNASSIGNED = -1
CONVERGENCE_THRESHOLD = 0.1
MAX_ITERATIONS = 100

StepResult = namedtuple("StepResult", ["moved", "iteration"])


class RunState(Enum):
    INITIAL = "initial"
    RUNNING = "running"
    FINISHED = "finished"


class PreconditionError(RuntimeError):
    """Raised when an operation needs a point set and the run has none."""


class ClusteringRun:
    """
    One run of Lloyd's algorithm over a fixed 2D point set.

    Holds the points (X_), one label per point (labels_, -1 = unassigned),
    the centroids (centroids_, row index == label) and the label -> point
    indices grouping (clusters_). labels_ and clusters_ are only ever
    rebuilt together, by assign() and reset().
    """

    def __init__(self, X=None, n_clusters=3, bounds=(800.0, 600.0),
                 threshold=CONVERGENCE_THRESHOLD, rng=None):
        self.n_clusters = n_clusters
        self.bounds = tuple(bounds)
        self.threshold = threshold
        self.rng = np.random.default_rng(rng)
        self.X_ = self._validate_input(X)
        self.reset()

    def _validate_input(self, X):
        if X is None:
            return np.empty((0, 2))
        if isinstance(X, pd.DataFrame):
            X = X.values
        X = np.asarray(X, dtype=float)
        if X.ndim != 2 or X.shape[1] != 2:
            raise ValueError("Input must be an (n_samples, 2) array or DataFrame")
        return X.copy()

    # ── state ───────────────────────────────────────────────────────────────

    @property
    def has_points(self):
        return len(self.X_) > 0

    @property
    def can_step(self):
        return self._check_state(self.state)

    def _check_state(self, state):
        if state is RunState.RUNNING:
            return True
        if state in (RunState.INITIAL, RunState.FINISHED):
            return False
        raise ValueError(f"Unknown run state: {state!r}")

    def reset(self):
        self.centroids_ = np.empty((0, 2))
        self.labels_ = np.full(len(self.X_), UNASSIGNED, dtype=int)
        self.clusters_ = []
        self.iteration = 0
        self.state = RunState.INITIAL

    # ── Lloyd's algorithm ───────────────────────────────────────────────────

    def initialize_centroids(self, k=None, bounds=None):
        """
        Draw k centroids uniformly inside bounds. k <= 0 leaves no centroids.
        """
        if not self.has_points:
            raise PreconditionError("Please generate data first.")
        if k is not None:
            self.n_clusters = k
        if bounds is not None:
            self.bounds = tuple(bounds)

        k = max(int(self.n_clusters), 0)
        width, height = self.bounds
        self.centroids_ = np.column_stack([
            self.rng.uniform(0.0, width, size=k),
            self.rng.uniform(0.0, height, size=k),
        ]).reshape(k, 2)
        return self.centroids_

    def assign(self):
        """
        Label every point with its nearest centroid (first index wins ties)
        and rebuild the grouping from scratch.
        """
        k = len(self.centroids_)
        if k == 0:
            self.labels_[:] = UNASSIGNED
            self.clusters_ = []
            return self.labels_

        diffs = self.X_[:, None, :] - self.centroids_[None, :, :]
        dists = np.sqrt(np.einsum('ijk,ijk->ij', diffs, diffs))
        self.labels_[:] = dists.argmin(axis=1)
        self.clusters_ = [np.flatnonzero(self.labels_ == i) for i in range(k)]
        return self.labels_

    def update_centroids(self):
        """
        Move each centroid to the mean of its points.

        Centroids without points stay where they are; they are not reseeded.
        Returns True if any centroid moved by more than `threshold`.
        """
        moved = False
        new_centroids = self.centroids_.copy()
        for idx, members in enumerate(self.clusters_):
            if len(members) == 0:
                logger.debug("Centroid %d has no points; left in place", idx)
                continue
            new_centroids[idx] = self.X_[members].mean(axis=0)
            if np.linalg.norm(new_centroids[idx] - self.centroids_[idx]) > self.threshold:
                moved = True
        self.centroids_ = new_centroids
        return moved

    def start(self, k=None):
        """Fresh centroids plus a first assignment; the run becomes steppable."""
        self.iteration = 0
        self.initialize_centroids(k)
        self.assign()
        self.state = RunState.RUNNING
        logger.debug("Started k-means with k=%d on %d points", len(self.centroids_), len(self.X_))
        return self

    def step(self):
        """
        One iteration: update centroids, then reassign points.
        A run that is not RUNNING is left untouched.
        """
        if not self.can_step:
            return StepResult(moved=False, iteration=self.iteration)

        self.iteration += 1
        moved = self.update_centroids()
        self.assign()
        logger.debug("Iteration %d: moved=%s", self.iteration, moved)
        if not moved:
            self.state = RunState.FINISHED
            logger.debug("Converged after %d iterations", self.iteration)
        return StepResult(moved=moved, iteration=self.iteration)

    def run_to_convergence(self, max_iterations=MAX_ITERATIONS):
        """
        Step until no centroid moves or the iteration count exceeds the cap.
        Returns True if the run converged rather than hitting the cap.
        """
        while self.can_step:
            result = self.step()
            if not result.moved:
                return True
            if result.iteration > max_iterations:
                self.state = RunState.FINISHED
                logger.debug("Stopped at the %d-iteration cap", max_iterations)
                return False
        return self.state is RunState.FINISHED

    def inertia(self):
        return compute_inertia(self.X_, self.labels_, self.centroids_)

    # ── accessors ───────────────────────────────────────────────────────────

    def get_metrics(self):
        return compute_all_metrics(self.X_, self.labels_, self.centroids_)

    def copy(self):
        return copy.deepcopy(self)
