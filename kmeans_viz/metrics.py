import numpy as np
from sklearn.metrics import silhouette_score


def _assigned(labels):
    labels = np.asarray(labels)
    return labels >= 0


def compute_inertia(X, labels, centroids):
    """
    Sum of squared distances from each point to its assigned centroid.
    Unassigned points (label -1) contribute nothing.
    """
    labels = np.asarray(labels)
    mask = _assigned(labels)
    if not mask.any():
        return 0.0
    diffs = X[mask] - centroids[labels[mask]]
    return float(np.einsum('ij,ij->', diffs, diffs))


def compute_silhouette(X, labels):
    labels = np.asarray(labels)
    mask = _assigned(labels)
    used = set(labels[mask])
    if 1 < len(used) < mask.sum():
        return float(silhouette_score(X[mask], labels[mask]))
    return np.nan


def cluster_population_distribution(labels, n_clusters=None):
    """
    Points per label. With `n_clusters`, empty clusters are reported as 0.
    """
    labels = np.asarray(labels)
    unique, counts = np.unique(labels[labels >= 0], return_counts=True)
    population = {int(lbl): int(cnt) for lbl, cnt in zip(unique, counts)}
    if n_clusters is not None:
        for idx in range(n_clusters):
            population.setdefault(idx, 0)
        population = dict(sorted(population.items()))
    return population


def average_distance_to_centroids(X, labels, centroids):
    if centroids is None:
        return {}
    distances = {}
    for idx, center in enumerate(centroids):
        pts = X[labels == idx]
        if len(pts) > 0:
            distances[idx] = float(np.mean(np.linalg.norm(pts - center, axis=1)))
        else:
            distances[idx] = np.nan
    return distances


def compute_wcss_per_cluster(X, labels, centroids):
    """
    Returns dict {cluster_id: within-cluster sum of squares}.
    """
    wcss = {}
    for idx, c in enumerate(centroids):
        pts = X[labels == idx]
        wcss[idx] = float(np.sum((pts - c)**2)) if len(pts) else 0.0
    return wcss


def compute_unbalanced_factor(labels):
    """
    Ratio of largest cluster size to smallest non-empty cluster size.
    """
    labels = np.asarray(labels)
    unique, counts = np.unique(labels[labels >= 0], return_counts=True)
    if len(counts) < 2:
        return float('nan')
    return float(counts.max() / counts.min())


def compute_all_metrics(X, labels, centroids=None):
    n_clusters = None if centroids is None else len(centroids)
    metrics = {
        "silhouette": compute_silhouette(X, labels),
        "population": cluster_population_distribution(labels, n_clusters),
        "avg_distance": average_distance_to_centroids(X, labels, centroids),
        "unbalanced_factor": compute_unbalanced_factor(labels),
    }
    if centroids is not None:
        metrics["inertia"] = compute_inertia(X, labels, centroids)
        metrics["wcss"] = compute_wcss_per_cluster(X, labels, centroids)
    return metrics
