import numpy as np
import matplotlib
import matplotlib.pyplot as plt

UNASSIGNED_COLOR = '#000000'
SELECTED_COLOR = '#ff6600'
CURVE_COLOR = '#0077cc'


def cluster_palette():
    return list(matplotlib.colormaps['tab10'].colors)


def plot_clusters(
        X: np.ndarray,
        labels: np.ndarray,
        centroids: np.ndarray = None,
        ax: plt.Axes = None,
        bounds: tuple = None,
        title: str = None,
        palette: list = None,
        figsize: tuple = (6, 6),
        savepath: str = None,
        point_size: int = 20,
        alpha: float = 0.8
) -> plt.Axes:
    """
    Scatter-plot X colored by `labels`, with `centroids` on top.

    Args:
      X          : array-like, shape (n_samples, 2)
      labels     : int array, shape (n_samples,); -1 = unassigned (black)
      centroids  : array, shape (n_clusters, 2), optional
      ax         : axes to draw into (cleared first); a new figure if None
      bounds     : (width, height) of the canvas; fixes the axis limits
      title      : axes title
      palette    : list of colors, cycled by label; defaults to tab10
      savepath   : if given, calls fig.savefig(savepath)

    Returns:
      ax : the matplotlib Axes instance
    """
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    else:
        ax.clear()
    if palette is None:
        palette = cluster_palette()

    X = np.asarray(X)
    labels = np.asarray(labels)

    for lab in np.unique(labels):
        mask = labels == lab
        if lab >= 0:
            col = palette[int(lab) % len(palette)]
            label_text = f"Cluster {lab}"
        else:
            col = UNASSIGNED_COLOR
            label_text = "Unassigned"
        ax.scatter(
            X[mask, 0], X[mask, 1],
            c=[col],
            s=point_size,
            alpha=alpha,
            label=label_text,
            linewidth=0,
        )

    if centroids is not None and len(centroids):
        colors = [palette[i % len(palette)] for i in range(len(centroids))]
        ax.scatter(
            centroids[:, 0], centroids[:, 1],
            c=colors,
            edgecolor='black',
            s=200,
            marker='X',
            linewidth=1.5,
            label='Centroids',
            zorder=3,
        )

    if bounds is not None:
        ax.set_xlim(0, bounds[0])
        # canvas coordinates: y grows downwards
        ax.set_ylim(bounds[1], 0)
    ax.set_aspect('equal', 'box')
    if title:
        ax.set_title(title)

    if savepath:
        ax.figure.savefig(savepath)

    return ax


def _elbow_xy(curve):
    return np.asarray(curve.ks, dtype=float), np.asarray(curve.inertias, dtype=float)


def plot_elbow_curve(curve, ax=None, selected_k=None, suggested_k=None, savepath=None):
    """
    Elbow plot of inertia vs. k. The selected k is drawn in orange and
    the detected knee, if any, is marked with a dashed line.
    """
    if ax is None:
        _, ax = plt.subplots()
    else:
        ax.clear()

    ax.set_xlabel("Number of clusters (k)")
    ax.set_ylabel("Inertia")
    ax.set_title("Elbow Method for Optimal k")
    ax.grid(True)

    if curve is None or len(curve) == 0:
        return ax

    ks, inertias = _elbow_xy(curve)
    ax.plot(ks, inertias, '-', color=CURVE_COLOR, lw=2)
    colors = [SELECTED_COLOR if k == selected_k else CURVE_COLOR for k in curve.ks]
    ax.scatter(ks, inertias, c=colors, s=60, edgecolor='#333333', zorder=3)
    ax.set_xticks(ks)

    if suggested_k is not None:
        ax.axvline(suggested_k, color='#E69F00', linestyle='--', linewidth=2, label='Knee')
        ax.legend(loc='best', fontsize='small')

    if savepath:
        ax.figure.savefig(savepath)

    return ax


def elbow_hit_test(curve, ax, x, y, radius=20.0):
    """
    k of the elbow marker within `radius` pixels of display point (x, y),
    or None. Markers are checked in k order; the first hit wins.
    """
    if curve is None or len(curve) == 0:
        return None
    ks, inertias = _elbow_xy(curve)
    pixels = ax.transData.transform(np.column_stack([ks, inertias]))
    d2 = (pixels[:, 0] - x) ** 2 + (pixels[:, 1] - y) ** 2
    for k, dist2 in zip(curve.ks, d2):
        if dist2 < radius ** 2:
            return k
    return None
