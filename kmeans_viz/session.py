"""
Interactive k-means session.

Owns the live clustering run and the elbow curve built for its point set,
and exposes the request methods a UI calls (generate, start, step, run,
select k, restore an elbow selection, reset). Listeners registered with
on_change / on_converged / on_alert are the only way state flows back out.
"""

import functools
import logging
from typing import Callable, List, Optional

import numpy as np

from kmeans_viz.clusterer import ClusteringRun, PreconditionError, RunState
from kmeans_viz.config import METHODS, LabConfig
from kmeans_viz.selection import ElbowCurve, build_elbow_curve
from kmeans_viz.synthetic_data import generate_points

logger = logging.getLogger(__name__)


class AutoStepper:
    """
    Repeating task on top of a timer factory.

    `timer_factory(interval_ms)` must return an object with
    add_callback(fn), start() and stop(), e.g. matplotlib's
    ``figure.canvas.new_timer``. The tick function returns False to end
    the loop. cancel() is synchronous and safe to call when nothing runs.
    """

    def __init__(self, timer_factory=None, interval_ms=50):
        self.timer_factory = timer_factory
        self.interval_ms = interval_ms
        self._timer = None
        self._tick = None

    @property
    def active(self):
        return self._timer is not None

    def start(self, tick: Callable[[], bool]):
        if self.timer_factory is None:
            raise RuntimeError("AutoStepper has no timer factory")
        self.cancel()
        self._tick = tick
        timer = self.timer_factory(self.interval_ms)
        timer.add_callback(functools.partial(self._on_timer, timer))
        self._timer = timer
        timer.start()

    def _on_timer(self, timer):
        # a stopped timer may still deliver one queued event
        if timer is not self._timer:
            return
        if not self._tick():
            self.cancel()

    def cancel(self):
        if self._timer is None:
            return
        timer, self._timer = self._timer, None
        self._tick = None
        timer.stop()


class KMeansSession:
    def __init__(self, config: Optional[LabConfig] = None, timer_factory=None):
        self.config = config or LabConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.method = self.config.method
        self.count = self.config.count
        self.k = self.config.k
        self.run = self._new_run()
        self.elbow_curve: Optional[ElbowCurve] = None
        self.selected_k: Optional[int] = None
        self.stepper = AutoStepper(timer_factory, self.config.interval_ms)

        self._change_listeners: List[Callable[[], None]] = []
        self._converged_listeners: List[Callable[[int], None]] = []
        self._alert_listeners: List[Callable[[str], None]] = []

    def _new_run(self, X=None):
        return ClusteringRun(X, n_clusters=self.k, bounds=self.config.bounds,
                             threshold=self.config.threshold, rng=self.rng)

    # ── listeners ───────────────────────────────────────────────────────────

    def on_change(self, fn):
        self._change_listeners.append(fn)
        return fn

    def on_converged(self, fn):
        self._converged_listeners.append(fn)
        return fn

    def on_alert(self, fn):
        self._alert_listeners.append(fn)
        return fn

    def _changed(self):
        for fn in self._change_listeners:
            fn()

    def _converged(self, iteration):
        logger.info("Clustering converged after %d iterations.", iteration)
        for fn in self._converged_listeners:
            fn(iteration)

    def _alert(self, message):
        logger.warning(message)
        for fn in self._alert_listeners:
            fn(message)

    # ── read-only views ─────────────────────────────────────────────────────

    @property
    def points(self):
        return self.run.X_

    @property
    def labels(self):
        return self.run.labels_

    @property
    def centroids(self):
        return self.run.centroids_

    @property
    def state(self) -> RunState:
        return self.run.state

    @property
    def iteration(self) -> int:
        return self.run.iteration

    @property
    def auto_running(self) -> bool:
        return self.stepper.active

    # ── requests ────────────────────────────────────────────────────────────

    def request_generate(self, method=None, count=None):
        """
        New point set, then a fresh elbow curve for it. Any clustering in
        progress is discarded.
        """
        method = self.method if method is None else method
        count = self.count if count is None else self.config.clamp_count(count)
        if method not in METHODS:
            raise ValueError(f"Unknown data method: {method!r}")

        self.stepper.cancel()
        X = generate_points(method, count, self.config.width,
                            self.config.height, self.rng)
        self.method, self.count = method, count
        self.run = self._new_run(X)
        self.selected_k = None
        self.elbow_curve = build_elbow_curve(
            X,
            self.config.k_range,
            self.config.bounds,
            max_iterations=self.config.max_iterations,
            threshold=self.config.threshold,
            rng=self.rng,
        )
        self._changed()
        return X

    def request_start(self):
        self.stepper.cancel()
        try:
            self.run.start(self.k)
        except PreconditionError as exc:
            self._alert(str(exc))
            return False
        logger.info("Started k-means with k=%d on %d points", self.k, len(self.points))
        self._changed()
        return True

    def _advance(self):
        """Single step shared by the manual and automatic drivers."""
        result = self.run.step()
        finished = not result.moved
        if not finished and result.iteration > self.config.max_iterations:
            self.run.state = RunState.FINISHED
            finished = True
        if finished:
            self.stepper.cancel()
        self._changed()
        if finished:
            self._converged(result.iteration)
        return not finished

    def request_step(self):
        """
        One manual step. Before the first start this starts the run instead.
        Returns False when nothing happened.
        """
        state = self.run.state
        if state is RunState.INITIAL:
            return self.request_start()
        if state is RunState.RUNNING:
            self.stepper.cancel()
            self._advance()
            return True
        if state is RunState.FINISHED:
            return False
        raise ValueError(f"Unknown run state: {state!r}")

    def request_run(self):
        """
        Step automatically until convergence. Without a timer factory the
        loop runs to completion before returning.
        """
        if self.run.state is not RunState.RUNNING and not self.request_start():
            return False
        if self.stepper.timer_factory is None:
            while self._advance():
                pass
        else:
            self.stepper.start(self._advance)
        return True

    def request_stop(self):
        self.stepper.cancel()
        self._changed()

    def request_reset(self):
        """Clear the clustering; the points and the elbow curve stay."""
        self.stepper.cancel()
        self.run.reset()
        self.selected_k = None
        self._changed()

    def request_select_k(self, k):
        k = self.config.clamp_k(k)
        self.stepper.cancel()
        self.k = k
        self.run.n_clusters = k
        self.selected_k = None
        if self.run.has_points:
            self.run.reset()
        self._changed()
        return k

    def request_restore_elbow_selection(self, k):
        """
        Replace the live run with the cached elbow clustering for `k`.
        """
        if self.elbow_curve is None or k not in self.elbow_curve:
            logger.warning("No elbow clustering cached for k=%s", k)
            return False
        self.stepper.cancel()
        restored = self.elbow_curve.restore(k)
        restored.rng = self.rng
        self.run = restored
        self.k = k
        self.selected_k = k
        logger.info("Restored elbow clustering for k=%d (inertia %.1f)",
                    k, self.elbow_curve[k].inertia)
        self._changed()
        return True
