from types import SimpleNamespace

import matplotlib.pyplot as plt
import pytest

from kmeans_viz.app import KMeansApp
from kmeans_viz.clusterer import RunState
from kmeans_viz.config import LabConfig


@pytest.fixture
def app():
    app = KMeansApp(LabConfig(method="clusters", count=60, k=3, seed=0))
    app.session.request_generate()
    yield app
    plt.close(app.fig)


def test_generate_draws_points_and_elbow(app):
    assert len(app.ax_points.collections) >= 1
    assert app.ax_elbow.get_ylabel() == "Inertia"
    assert "iteration 0" in app.ax_points.get_title()


def test_k_applies_on_release(app):
    app.k_slider.set_val(5)
    assert app.session.k == 3
    app._commit_k(None)
    assert app.session.k == 5


def test_step_and_convergence_message(app):
    app._on_start(None)
    assert app.session.state is RunState.RUNNING
    while app.session.state is RunState.RUNNING:
        app._on_step(None)
    assert "converged" in app.status.get_text()
    assert not app.buttons["step"].active


def test_alert_without_points():
    app = KMeansApp(LabConfig(seed=0))
    app._on_start(None)
    assert app.status.get_text() == "Please generate data first."
    plt.close(app.fig)


def test_count_submit_clamps_and_regenerates(app):
    app.count_box.set_val("5")
    assert app.count_box.text == "10"
    assert len(app.session.points) == 10


def test_run_disables_controls_until_reset(app):
    app._on_run(None)
    assert app.session.auto_running
    assert not app.buttons["generate"].active
    app._on_reset(None)
    assert not app.session.auto_running
    assert app.buttons["generate"].active


def test_elbow_click_restores_clustering(app):
    app.fig.canvas.draw()
    curve = app.session.elbow_curve
    x, y = app.ax_elbow.transData.transform((4, curve[4].inertia))
    app._on_elbow_click(SimpleNamespace(inaxes=app.ax_elbow, x=x, y=y))

    assert app.session.selected_k == 4
    assert app.session.k == 4
    assert app.session.state is RunState.FINISHED
    # the slider follows without resetting the restored clustering
    assert app.k_slider.val == 4
    assert app.pending_k == 4
