"""
Matplotlib front end: point canvas, elbow plot and the controls that drive
a KMeansSession.
"""

import logging

import matplotlib.pyplot as plt
from matplotlib.widgets import Button, RadioButtons, Slider, TextBox

from kmeans_viz.clusterer import RunState
from kmeans_viz.config import METHODS, LabConfig
from kmeans_viz.plotter import elbow_hit_test, plot_clusters, plot_elbow_curve
from kmeans_viz.session import KMeansSession

logger = logging.getLogger(__name__)


class KMeansApp:
    def __init__(self, config: LabConfig = None):
        self.config = config or LabConfig()
        self.fig = plt.figure(figsize=(13, 7))
        self.session = KMeansSession(
            self.config,
            timer_factory=lambda interval: self.fig.canvas.new_timer(interval=interval),
        )
        self.pending_k = self.session.k

        self._build_axes()
        self._build_controls()

        self.session.on_change(self.draw)
        self.session.on_converged(self._show_converged)
        self.session.on_alert(self._show_alert)

        self.fig.canvas.mpl_connect('button_press_event', self._on_elbow_click)
        self.fig.canvas.mpl_connect('button_release_event', self._commit_k)

    # UI builders -------------------------------------------------------------
    def _build_axes(self):
        self.ax_points = self.fig.add_axes([0.22, 0.12, 0.42, 0.8])
        self.ax_elbow = self.fig.add_axes([0.70, 0.35, 0.28, 0.5])
        self.status = self.fig.text(0.22, 0.03, "", fontsize=11)

    def _build_controls(self):
        ax_method = self.fig.add_axes([0.02, 0.70, 0.15, 0.15])
        ax_method.set_title("Data method", fontsize=10)
        self.method_radio = RadioButtons(ax_method, METHODS,
                                         active=METHODS.index(self.session.method))

        ax_count = self.fig.add_axes([0.08, 0.63, 0.09, 0.04])
        self.count_box = TextBox(ax_count, "Points ", initial=str(self.session.count))
        self.count_box.on_submit(self._on_count_submit)

        ax_k = self.fig.add_axes([0.04, 0.56, 0.12, 0.03])
        self.k_slider = Slider(ax_k, "k", self.config.k_min, self.config.k_max,
                               valinit=self.session.k, valstep=1)
        self.k_slider.on_changed(self._on_k_drag)

        self.buttons = {}
        specs = [
            ("generate", "Generate Data", self._on_generate),
            ("start", "Start", self._on_start),
            ("step", "Next Step", self._on_step),
            ("run", "Run", self._on_run),
            ("reset", "Reset", self._on_reset),
        ]
        for i, (key, text, handler) in enumerate(specs):
            ax_btn = self.fig.add_axes([0.03, 0.45 - i * 0.07, 0.14, 0.05])
            button = Button(ax_btn, text)
            button.on_clicked(handler)
            self.buttons[key] = button

    # Handlers ----------------------------------------------------------------
    def _on_generate(self, _event):
        self.session.request_generate(self.method_radio.value_selected,
                                      self.count_box.text)
        self.count_box.set_val(str(self.session.count))
        self.status.set_text("")

    def _on_count_submit(self, text):
        count = self.config.clamp_count(text)
        if str(count) != text:
            # set_val re-enters on_submit with the clamped value
            self.count_box.set_val(str(count))
            return
        if self.session.run.has_points and count != self.session.count:
            self.session.request_generate(self.method_radio.value_selected, count)

    def _on_start(self, _event):
        if self.session.request_start():
            self.status.set_text("")

    def _on_step(self, _event):
        self.session.request_step()

    def _on_run(self, _event):
        self.session.request_run()
        self._update_buttons()

    def _on_reset(self, _event):
        self.session.request_reset()
        self.status.set_text("")

    def _on_k_drag(self, value):
        self.pending_k = int(value)

    def _commit_k(self, _event):
        """k changes apply when the slider is released."""
        if self.pending_k != self.session.k:
            self.session.request_select_k(self.pending_k)

    def _on_elbow_click(self, event):
        if event.inaxes is not self.ax_elbow:
            return
        k = elbow_hit_test(self.session.elbow_curve, self.ax_elbow, event.x, event.y)
        if k is None:
            logger.debug("No elbow point near click at (%s, %s)", event.x, event.y)
            return
        if self.session.request_restore_elbow_selection(k):
            self._sync_slider(k)

    def _sync_slider(self, k):
        # the restored snapshot already satisfies k; do not reset through select_k
        self.k_slider.eventson = False
        self.k_slider.set_val(k)
        self.k_slider.eventson = True
        self.pending_k = k

    def _show_converged(self, iteration):
        self._update_buttons()
        self.status.set_text(f"Clustering converged after {iteration} iterations.")
        self.status.set_color('black')

    def _show_alert(self, message):
        self.status.set_text(message)
        self.status.set_color('red')
        self.fig.canvas.draw_idle()

    # Drawing -----------------------------------------------------------------
    def _update_buttons(self):
        state = self.session.state
        running = self.session.auto_running
        self.buttons["start"].set_active(not running)
        self.buttons["step"].set_active(state is not RunState.FINISHED and not running)
        self.buttons["run"].set_active(state is not RunState.FINISHED and not running)
        self.buttons["generate"].set_active(not running)

    def draw(self):
        session = self.session
        plot_clusters(
            session.points, session.labels, session.centroids,
            ax=self.ax_points,
            bounds=self.config.bounds,
            title=f"k = {session.k}   iteration {session.iteration}   ({session.state.value})",
        )
        curve = session.elbow_curve
        plot_elbow_curve(
            curve,
            ax=self.ax_elbow,
            selected_k=session.selected_k,
            suggested_k=curve.suggest_k() if curve is not None else None,
        )
        self._update_buttons()
        self.fig.canvas.draw_idle()

    def show(self):
        self.session.request_generate()
        plt.show()
