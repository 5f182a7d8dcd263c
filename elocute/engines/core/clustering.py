"""
Clustering Engine

Medoid selection and cluster quality over precomputed distances.

CANONICAL INTERFACE:
    def compute(clusters: Sequence[Cluster]) -> pd.DataFrame
    Output: [cluster_id, size, centroid_id, description_density, cohesion]

The attempt metric (DTW) is not Euclidean over raw features, so cluster
representatives are medoids rather than vector means, and quality is
measured with a Davies-Bouldin index over medoid distances.
"""

import numpy as np
import pandas as pd
from typing import Sequence


def compute(clusters: Sequence) -> pd.DataFrame:
    """
    Summarize clusters, one row per cluster.

    Parameters
    ----------
    clusters : sequence of Cluster
        Clusters of one group

    Returns
    -------
    pd.DataFrame
        [cluster_id, size, centroid_id, description_density, cohesion]
    """
    results = []

    for cluster in clusters:
        results.append({
            'cluster_id': cluster.uid,
            'size': len(cluster),
            'centroid_id': cluster.centroid.uid,
            'description_density': cluster.description_density,
            'cohesion': cluster.average_centroid_distance,
        })

    return pd.DataFrame(
        results,
        columns=['cluster_id', 'size', 'centroid_id', 'description_density', 'cohesion'],
    )


def medoid_index(distances: np.ndarray, ids: Sequence[int]) -> int:
    """
    Index of the member with the smallest total distance to all others.

    Ties are broken by the lowest id.

    Parameters
    ----------
    distances : np.ndarray
        Symmetric (k, k) distance matrix with a zero diagonal
    ids : sequence of int
        Member ids, aligned with the matrix rows

    Returns
    -------
    int
        Row index of the medoid
    """
    totals = np.asarray(distances, dtype=np.float64).sum(axis=1)
    best = 0

    for k in range(1, len(totals)):
        if totals[k] < totals[best] or (totals[k] == totals[best] and ids[k] < ids[best]):
            best = k

    return best


def davies_bouldin(cohesions: Sequence[float], separations: np.ndarray) -> float:
    """
    Davies-Bouldin index.

    For every ordered pair of distinct clusters (i, j):
        R_ij = (s_i + s_j) / d_ij
    DBI = mean over i of max over j != i of R_ij. Lower is better.

    Parameters
    ----------
    cohesions : sequence of float
        Mean member-to-centroid distance per cluster
    separations : np.ndarray
        (k, k) centroid-to-centroid distance matrix

    Returns
    -------
    float
        DBI, 0.0 for fewer than two clusters
    """
    k = len(cohesions)
    if k < 2:
        return 0.0

    worst = []
    for i in range(k):
        ratios = []
        for j in range(k):
            if i == j:
                continue
            d = separations[i][j]
            spread = cohesions[i] + cohesions[j]
            if d > 0:
                ratios.append(spread / d)
            else:
                ratios.append(np.inf if spread > 0 else 0.0)
        worst.append(max(ratios))

    return float(np.mean(worst))
