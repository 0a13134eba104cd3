# test_run.py

import numpy as np

from kmeans_viz.clusterer import RunState
from kmeans_viz.config import LabConfig
from kmeans_viz.run import build_parser, main, run_headless


def test_parser_maps_to_config():
    args = build_parser().parse_args(["-m", "clusters", "-n", "120", "-k", "4", "--seed", "3"])
    config = LabConfig.from_args(args)
    assert config.method == "clusters"
    assert config.count == 120
    assert config.k == 4
    assert config.seed == 3


def test_run_headless_writes_figures(tmp_path):
    config = LabConfig(method="clusters", count=90, k=3, seed=1)
    session = run_headless(config, str(tmp_path))

    assert session.state is RunState.FINISHED
    assert len(session.points) == 90
    assert np.all(session.labels >= 0)
    assert (tmp_path / "clusters.png").exists()
    assert (tmp_path / "elbow.png").exists()


def test_main_headless(tmp_path):
    main(["--headless", "-n", "40", "--seed", "0", "-o", str(tmp_path), "--log-level", "warning"])
    assert (tmp_path / "clusters.png").exists()
    assert (tmp_path / "elbow.png").exists()
