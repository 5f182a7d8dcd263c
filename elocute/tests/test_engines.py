"""
Test ELOCUTE Engines
====================
"""

import numpy as np
import pytest


def test_dtw_identical_sequences():
    """Identical sequences align at zero cost."""
    from elocute.engines.core import dtw

    np.random.seed(42)
    x = np.random.randn(12, 13)

    assert dtw.distance(x, x.copy()) == 0.0


def test_dtw_symmetric():
    """distance(a, b) == distance(b, a) exactly, also for unequal lengths."""
    from elocute.engines.core import dtw

    np.random.seed(42)
    a = np.random.randn(7, 3)
    b = np.random.randn(11, 3)

    assert dtw.distance(a, b) == dtw.distance(b, a)
    assert dtw.distance(a, b) >= 0


def test_dtw_hand_computed():
    """Small alignment checked against the recurrence by hand."""
    from elocute.engines.core import dtw

    a = np.array([[0.0], [1.0], [2.0]])
    b = np.array([[0.0], [2.0]])

    assert dtw.distance(a, b) == pytest.approx(1.0)


def test_dtw_constant_offset():
    """Equal-length constant sequences align on the diagonal."""
    from elocute.engines.core import dtw

    a = np.zeros((4, 2))
    b = a + 3.0

    assert dtw.distance(a, b) == pytest.approx(4 * np.sqrt(18.0))


def test_dtw_dimension_mismatch_is_infinite():
    """Frames of different width never align, without raising."""
    from elocute.engines.core import dtw

    a = np.zeros((3, 13))
    b = np.zeros((3, 12))

    assert dtw.distance(a, b) == np.inf


def test_cost_path_hand_computed():
    """Backtracked increments, normalized by the largest one."""
    from elocute.engines.core import dtw

    a = np.array([[0.0], [1.0], [2.0]])
    b = np.array([[0.0], [2.0]])

    path = dtw.cost_path(a, b)

    assert len(path) == 3
    np.testing.assert_allclose(path, [0.0, 1.0, 0.0])


def test_cost_path_bounds():
    """Increments lie in [0, 1] with length max(n, m)."""
    from elocute.engines.core import dtw

    np.random.seed(7)
    a = np.random.randn(9, 4)
    b = np.random.randn(14, 4)

    path = dtw.cost_path(a, b)

    assert len(path) == 14
    assert np.all(path >= 0)
    assert np.all(path <= 1)
    assert path.max() == pytest.approx(1.0)


def test_cost_path_degenerate():
    """Identical sequences give zeros, impossible alignments give NaN."""
    from elocute.engines.core import dtw

    x = np.ones((5, 2))

    assert np.all(dtw.cost_path(x, x) == 0)
    assert np.all(np.isnan(dtw.cost_path(x, np.ones((5, 3)))))


def test_dtw_compute_table():
    """Pairwise table has one row per unordered pair."""
    from elocute.core.node import Node
    from elocute.engines.core import dtw

    nodes = [Node(i, None, [[float(i)], [float(i)]]) for i in range(1, 4)]

    table = dtw.compute(nodes)

    assert list(table.columns) == ['node_a', 'node_b', 'dtw_distance', 'dtw_normalized']
    assert len(table) == 3
    row = table[(table['node_a'] == 1) & (table['node_b'] == 3)].iloc[0]
    assert row['dtw_distance'] == pytest.approx(4.0)
    assert row['dtw_normalized'] == pytest.approx(1.0)


def test_medoid_tie_breaks_on_lowest_id():
    """Equal totals resolve to the member with the lowest id."""
    from elocute.engines.core import clustering

    distances = np.array([
        [0.0, 1.0, 1.0],
        [1.0, 0.0, 1.0],
        [1.0, 1.0, 0.0],
    ])

    assert clustering.medoid_index(distances, [5, 3, 9]) == 1


def test_medoid_minimizes_total_distance():
    from elocute.engines.core import clustering

    distances = np.array([
        [0.0, 1.0, 10.0],
        [1.0, 0.0, 9.0],
        [10.0, 9.0, 0.0],
    ])

    assert clustering.medoid_index(distances, [1, 2, 3]) == 1


def test_davies_bouldin():
    """Hand-computed index and the single-cluster convention."""
    from elocute.engines.core import clustering

    assert clustering.davies_bouldin([1.0], np.zeros((1, 1))) == 0.0

    separations = np.array([[0.0, 4.0], [4.0, 0.0]])
    assert clustering.davies_bouldin([1.0, 1.0], separations) == pytest.approx(0.5)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
