"""
Test Word
=========

Classification, remediation paths and status reporting.
"""

import numpy as np
import pytest


def _scalar_word(threshold):
    """Word whose attempts are single-frame scalars: DTW is |a - b|."""
    from elocute.core.word import Word

    word = Word('scalar', threshold=threshold)

    def node(value):
        return word.create_node([[float(value)]])

    return word, node


def test_identical_attempt_succeeds():
    from elocute.core.report import Classification
    from elocute.core.word import Word

    np.random.seed(42)
    mfcc = np.random.randn(20, 13)

    word = Word('hello')
    model = word.train(word.create_node(mfcc))
    report = word.evaluate(word.create_node(mfcc.copy()))

    assert report.classification is Classification.SUCCESS
    assert not report.classified_as_failure
    assert report.model_distance == 0.0
    assert report.characteristics.model is model
    assert report.backtracking_path is None
    assert len(word.layer.success) == 1


def test_offset_attempt_fails_with_path_to_success():
    from elocute.core.word import Word

    word = Word('hello', threshold=5.0)
    word.train(word.create_node(np.zeros((3, 2))))

    good = word.evaluate(word.create_node(np.zeros((3, 2))))
    bad = word.evaluate(word.create_node(np.zeros((3, 2)) + 50.0))

    assert not good.classified_as_failure
    assert bad.classified_as_failure
    assert bad.model_distance == pytest.approx(3 * np.sqrt(5000.0))

    path = bad.backtracking_path
    assert len(path) == 2
    assert path.start is bad.characteristics.analyzed
    assert path.end is good.characteristics.analyzed
    assert path.cost == pytest.approx(3 * np.sqrt(5000.0))
    assert bad.target_group == 'success'
    assert good.target_group is None


def test_failure_without_success_targets_model():
    """Nothing accepted yet: the correction aims at the reference cluster."""
    word, node = _scalar_word(threshold=1.0)
    model = word.train(node(0))

    report = word.evaluate(node(4))

    assert report.classified_as_failure
    assert [c.uid for c in report.backtracking_path] == [report.characteristics.analyzed.uid, model.uid]
    assert report.backtracking_path.cost == pytest.approx(4.0)
    assert report.target_group == 'model'
    assert report.to_dict()['target_group'] == 'model'


def test_untrained_word_fails_without_path():
    word, node = _scalar_word(threshold=1.0)

    report = word.evaluate(node(0))

    assert report.classified_as_failure
    assert report.model_distance == float('inf')
    assert report.characteristics.model is None
    assert report.backtracking_path is None

    data = report.to_dict()
    assert data['model_distance'] is None
    assert data['backtracking_path'] is None
    assert data['target_group'] is None


def test_path_routes_through_failures():
    """Stepping through intermediate failures beats one large hop."""
    word, node = _scalar_word(threshold=1.0)
    word.train(node(0))

    success = word.evaluate(node(0.5)).characteristics.analyzed
    f1 = word.evaluate(node(10)).characteristics.analyzed
    r2 = word.evaluate(node(5))
    f2 = r2.characteristics.analyzed
    r3 = word.evaluate(node(20))
    f3 = r3.characteristics.analyzed

    assert len(word.layer.failure) == 3

    # From 5 the direct hop is best
    assert list(r2.backtracking_path) == [f2, success]
    assert r2.backtracking_path.cost == pytest.approx(4.5)

    # From 20: hops 10, 5, 4.5 cost sqrt(3) * 10 < 19.5 direct
    assert list(r3.backtracking_path) == [f3, f1, f2, success]
    assert r3.backtracking_path.cost == pytest.approx(10 * np.sqrt(3))


def test_path_visits_each_failure_once():
    word, node = _scalar_word(threshold=1.0)
    word.train(node(0))
    word.evaluate(node(0.5))

    for value in [3, 6, 9, 12, 15]:
        report = word.evaluate(node(value))

    steps = [c.uid for c in report.backtracking_path]
    assert len(steps) == len(set(steps))
    assert report.backtracking_path.start is report.characteristics.analyzed


def test_evaluation_is_deterministic():
    def run():
        word, node = _scalar_word(threshold=1.0)
        word.train(node(0))
        word.train(node(0.4))
        return [word.evaluate(node(v)).to_dict() for v in [0.2, 7, 3, 11, 0.9, 5]]

    assert run() == run()


def test_each_pair_computed_at_most_once():
    from elocute.core.word import Word

    np.random.seed(0)
    word = Word('hello', threshold=8.0)

    n = 12
    for i in range(3):
        word.train(word.create_node(np.random.randn(6, 3)))
    for i in range(n - 3):
        word.evaluate(word.create_node(np.random.randn(5 + i % 3, 3)))

    assert word.nodes.computations <= n * (n - 1) // 2


def test_evaluate_does_not_grow_model():
    word, node = _scalar_word(threshold=1.0)
    word.train(node(0))

    for value in [0.1, 5, 0.3, 9]:
        word.evaluate(node(value))

    assert len(word.layer.model.members) == 1
    assert len(word.layer.model) == 1
    assert len(word.layer.success.members) == 2
    assert len(word.layer.failure.members) == 2


def test_close_bands_in_report():
    word, node = _scalar_word(threshold=1.0)
    word.train(node(0))
    word.evaluate(node(0.2))
    word.evaluate(node(10))

    first = word.layer.failure.cluster_list[0]
    report = word.evaluate(node(10.5))

    assert report.classified_as_failure
    assert report.characteristics.analyzed is first
    assert report.characteristics.success == word.layer.success.cluster_list
    assert report.characteristics.failure == []


def test_status():
    word, node = _scalar_word(threshold=1.0)
    word.train(node(0))
    word.evaluate(node(0.5))
    word.evaluate(node(10))

    status = word.status()

    assert status['name'] == 'scalar'
    assert status['version'] == '1'
    assert set(status['groups']) == {'model', 'success', 'failure'}

    model = status['groups']['model']
    assert model['nodes'] == 1
    assert model['clusters'] == 1
    assert model['dbi'] == 0.0
    assert model['cluster_stats'][0]['size'] == 1
    assert model['cluster_stats'][0]['cohesion'] == 0.0

    text = word.status_text()
    assert 'model layer:' in text
    assert 'failure layer:' in text
    assert '    total nodes: 1' in text
    assert '    cluster#0:' in text


def test_from_config():
    from elocute.config import DEFAULT_CONFIG
    from elocute.core.word import Word

    word = Word.from_config('hello', {**DEFAULT_CONFIG, 'distance_threshold': 12.0})

    assert word.threshold == 12.0
    assert word.layer.failure.threshold == 12.0
    assert word.close_fraction == DEFAULT_CONFIG['close_fraction']


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
