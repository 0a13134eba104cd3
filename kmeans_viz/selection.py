import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
from kneed import KneeLocator

from kmeans_viz.clusterer import (
    CONVERGENCE_THRESHOLD,
    MAX_ITERATIONS,
    ClusteringRun,
    RunState,
)
from kmeans_viz.metrics import (
    compute_silhouette,
    compute_unbalanced_factor,
    compute_wcss_per_cluster,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ElbowRecord:
    """Terminal state of one k-means run on the elbow curve."""

    k: int
    inertia: float
    points: np.ndarray
    labels: np.ndarray
    centroids: np.ndarray
    iterations: int
    converged: bool


def _detect_knee(ks, inertias, curve="convex", direction="decreasing") -> Optional[int]:
    """
    Runs KneeLocator on inertia vs. k and returns the integer k, or None.
    """
    ks = np.asarray(ks, dtype=float)
    ys = np.asarray(inertias, dtype=float)
    if len(ks) < 3 or not np.all(np.isfinite(ys)):
        return None
    kl = KneeLocator(ks, ys, curve=curve, direction=direction)
    if kl.knee is None:
        return None
    return int(kl.knee)


class ElbowCurve:
    """
    Inertia vs. k, one independent run per k, plus the cached terminal
    clustering of every run. Built once per point set and never patched.
    """

    def __init__(self, records: List[ElbowRecord], bounds=(800.0, 600.0),
                 threshold=CONVERGENCE_THRESHOLD):
        self._records: Dict[int, ElbowRecord] = {r.k: r for r in records}
        self.bounds = tuple(bounds)
        self.threshold = threshold
        self._knee: Optional[int] = None
        self._knee_done = False

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self.records)

    def __contains__(self, k):
        return k in self._records

    def __getitem__(self, k) -> ElbowRecord:
        return self._records[k]

    @property
    def records(self) -> List[ElbowRecord]:
        return [self._records[k] for k in sorted(self._records)]

    @property
    def ks(self) -> List[int]:
        return sorted(self._records)

    @property
    def inertias(self) -> List[float]:
        return [r.inertia for r in self.records]

    def suggest_k(self) -> Optional[int]:
        """
        k at the knee of the inertia curve, None if there is no clear knee.
        Computed once; the records never change after construction.
        """
        if not self._knee_done:
            self._knee = _detect_knee(self.ks, self.inertias)
            self._knee_done = True
        return self._knee

    def restore(self, k) -> ClusteringRun:
        """
        A new run holding copies of the cached clustering for `k`.
        Raises KeyError if `k` is not on the curve.
        """
        record = self._records[k]
        run = ClusteringRun(record.points, n_clusters=k, bounds=self.bounds,
                            threshold=self.threshold)
        run.centroids_ = record.centroids.copy()
        run.labels_ = record.labels.copy()
        run.clusters_ = [np.flatnonzero(run.labels_ == i) for i in range(len(run.centroids_))]
        run.iteration = record.iterations
        run.state = RunState.FINISHED
        return run

    def to_frame(self) -> pd.DataFrame:
        """One row per k, in the shape of a metrics-over-k table."""
        rows = []
        for r in self.records:
            wcss = list(compute_wcss_per_cluster(r.points, r.labels, r.centroids).values())
            rows.append({
                "n_clusters":        r.k,
                "inertia":           r.inertia,
                "silhouette":        compute_silhouette(r.points, r.labels),
                "unbalanced_factor": compute_unbalanced_factor(r.labels),
                "wcss_mean":         float(np.mean(wcss)) if wcss else np.nan,
                "iterations":        r.iterations,
                "converged":         r.converged,
            })
        columns = ["n_clusters", "inertia", "silhouette", "unbalanced_factor",
                   "wcss_mean", "iterations", "converged"]
        return pd.DataFrame(rows, columns=columns).set_index("n_clusters", drop=False)


def build_elbow_curve(
    X,
    k_range: Iterable[int] = range(1, 11),
    bounds=(800.0, 600.0),
    *,
    max_iterations: int = MAX_ITERATIONS,
    threshold: float = CONVERGENCE_THRESHOLD,
    rng=None,
) -> ElbowCurve:
    """
    Run k-means to convergence for every k in `k_range` on its own copy
    of X and record the final inertia and clustering.

    Centroids are initialised at random, so two builds on the same X are
    generally different realisations of the curve.
    """
    rng = np.random.default_rng(rng)
    records = []
    for k in k_range:
        run = ClusteringRun(X, n_clusters=k, bounds=bounds,
                            threshold=threshold, rng=rng)
        if not run.has_points:
            continue
        run.start()
        converged = run.run_to_convergence(max_iterations)
        records.append(ElbowRecord(
            k=k,
            inertia=run.inertia(),
            points=run.X_.copy(),
            labels=run.labels_.copy(),
            centroids=run.centroids_.copy(),
            iterations=run.iteration,
            converged=converged,
        ))

    curve = ElbowCurve(records, bounds=bounds, threshold=threshold)
    logger.info("Built elbow curve for k=%s: %s", curve.ks,
                ", ".join(f"{v:.1f}" for v in curve.inertias))
    return curve
