# run.py

import argparse
import logging
import os

import matplotlib.pyplot as plt

from kmeans_viz.config import METHODS, LabConfig
from kmeans_viz.plotter import plot_clusters, plot_elbow_curve
from kmeans_viz.session import KMeansSession

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Interactive k-means and elbow-method lab")
    parser.add_argument('-m', '--method', choices=METHODS)
    parser.add_argument('-n', '--count', type=int, help="number of points (clamped to 10-1000)")
    parser.add_argument('-k', '--k', type=int, help="initial number of clusters")
    parser.add_argument('--k-max', dest='k_max', type=int)
    parser.add_argument('--width', type=float)
    parser.add_argument('--height', type=float)
    parser.add_argument('--interval-ms', dest='interval_ms', type=int)
    parser.add_argument('--seed', type=int)
    parser.add_argument('--headless', action='store_true',
                        help="run to convergence and save figures instead of opening a window")
    parser.add_argument('-o', '--output-dir', default='.')
    parser.add_argument('--log-level', default='INFO')
    return parser


def run_headless(config, output_dir="."):
    """
    Generate, cluster to convergence and save the two figures.
    Returns the session.
    """
    session = KMeansSession(config)
    session.request_generate()
    session.request_run()

    curve = session.elbow_curve
    os.makedirs(output_dir, exist_ok=True)

    ax = plot_clusters(
        session.points, session.labels, session.centroids,
        bounds=config.bounds,
        title=f"KMeans (k={session.k}, {session.iteration} iterations)",
        savepath=os.path.join(output_dir, "clusters.png"),
    )
    plt.close(ax.figure)

    ax = plot_elbow_curve(
        curve,
        selected_k=session.k,
        suggested_k=curve.suggest_k(),
        savepath=os.path.join(output_dir, "elbow.png"),
    )
    plt.close(ax.figure)

    logger.info("Elbow curve:\n%s", curve.to_frame().to_string(index=False))
    return session


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = LabConfig.from_args(args)
    logger.debug("Config: %s", config.to_dict())

    if args.headless:
        run_headless(config, args.output_dir)
        return

    from kmeans_viz.app import KMeansApp
    KMeansApp(config).show()


if __name__ == "__main__":
    main()
