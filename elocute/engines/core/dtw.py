"""
Dynamic Time Warping (DTW) Engine

Measures similarity between two utterances allowing for temporal shifts.

CANONICAL INTERFACE:
    def distance(seq_a: np.ndarray, seq_b: np.ndarray) -> float
    def cost_path(seq_a: np.ndarray, seq_b: np.ndarray) -> np.ndarray
    def compute(nodes: Sequence[Node]) -> pd.DataFrame
    Output: [node_a, node_b, dtw_distance, dtw_normalized]

Each sequence is a (n_frames, n_dims) feature matrix. DTW is applied on the
time axis, Euclidean distance on the feature axis. Frames of different
dimensionality never align: their local cost is infinite.
"""

import numpy as np
import pandas as pd
from scipy.spatial.distance import cdist
from typing import Sequence


def compute(nodes: Sequence) -> pd.DataFrame:
    """
    Compute DTW distance for all node pairs.

    CANONICAL INTERFACE:
        Input:  nodes exposing ``uid`` and ``features``
        Output: primitives [node_a, node_b, dtw_distance, dtw_normalized]

    Parameters
    ----------
    nodes : sequence of Node
        Attempts to compare

    Returns
    -------
    pd.DataFrame
        Pairwise DTW distances, one row per unordered pair
    """
    results = []

    for i, node_a in enumerate(nodes):
        for node_b in nodes[i + 1:]:
            d = distance(node_a.features, node_b.features)

            # Normalize by path length
            n = len(node_a.features) + len(node_b.features)
            normalized = d / n if n > 0 else 0.0

            results.append({
                'node_a': node_a.uid,
                'node_b': node_b.uid,
                'dtw_distance': d,
                'dtw_normalized': normalized,
            })

    return pd.DataFrame(results, columns=['node_a', 'node_b', 'dtw_distance', 'dtw_normalized'])


def local_costs(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Euclidean distance between every frame of x and every frame of y.

    Returns an (n, m) matrix filled with +inf when the frame
    dimensionalities differ.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    if x.ndim != 2 or y.ndim != 2 or x.shape[1] != y.shape[1]:
        return np.full((len(x), len(y)), np.inf)

    return cdist(x, y, metric='euclidean')


def cost_matrix(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Cumulative DTW cost matrix of shape (n + 1, m + 1).

    Row 0 and column 0 are +inf except the origin, which forces the warp
    path to start at (1, 1).
    """
    local = local_costs(x, y)
    n, m = local.shape

    # Initialize cost matrix
    dtw = np.full((n + 1, m + 1), np.inf)
    dtw[0, 0] = 0

    # Fill cost matrix
    for i in range(1, n + 1):
        for j in range(1, m + 1):
            dtw[i, j] = local[i - 1, j - 1] + min(
                dtw[i - 1, j],      # insertion
                dtw[i, j - 1],      # deletion
                dtw[i - 1, j - 1]   # match
            )

    return dtw


def distance(x: np.ndarray, y: np.ndarray) -> float:
    """
    Compute DTW distance between two feature sequences.

    Uses dynamic programming to find minimum cost alignment.
    """
    dtw = cost_matrix(x, y)
    return float(dtw[-1, -1])


def cost_path(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Normalized per-step cost along the optimal warp path.

    Backtracks from (n, m). At every cell the diagonal predecessor is
    taken unless the vertical, then the horizontal one is strictly
    cheaper. The cumulative cost of max(n, m) visited cells is
    differenced into increments and scaled by the largest increment.

    Parameters
    ----------
    x, y : np.ndarray
        Feature sequences (n_frames, n_dims)

    Returns
    -------
    np.ndarray
        Increments in [0, 1], oldest step first. All zeros for identical
        sequences, all NaN when no finite alignment exists.
    """
    dtw = cost_matrix(x, y)
    i, j = dtw.shape[0] - 1, dtw.shape[1] - 1
    length = max(i, j)

    if length == 0:
        return np.array([])

    path = np.zeros(length)

    for k in range(length - 1, -1, -1):
        path[k] = dtw[i, j]

        if i == 0 and j == 0:
            continue

        # Diagonal first, then vertical, then horizontal on strict improvement
        ni, nj = max(i - 1, 0), max(j - 1, 0)
        minimum = dtw[ni, nj]

        if i > 0 and dtw[i - 1, j] < minimum:
            minimum = dtw[i - 1, j]
            ni, nj = i - 1, j

        if j > 0 and dtw[i, j - 1] < minimum:
            minimum = dtw[i, j - 1]
            ni, nj = i, j - 1

        i, j = ni, nj

    if not np.all(np.isfinite(path)):
        return np.full(length, np.nan)

    # Cumulative -> per-step increments
    steps = np.diff(path, prepend=0.0)

    maximum = steps.max()
    if maximum <= 0:
        return np.zeros(length)

    return steps / maximum
