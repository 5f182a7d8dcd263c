"""
Test HTTP Routes
================
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    from elocute.config import DEFAULT_CONFIG
    from elocute.server import WordRegistry, create_app

    registry = WordRegistry({**DEFAULT_CONFIG, 'distance_threshold': 5.0})
    return TestClient(create_app(registry))


ZEROS = [[0.0, 0.0], [0.0, 0.0], [0.0, 0.0]]
OFFSET = [[50.0, 50.0], [50.0, 50.0], [50.0, 50.0]]


def test_app_uses_given_registry():
    """An empty registry handed to the app is the one it serves."""
    from elocute.config import DEFAULT_CONFIG
    from elocute.server import WordRegistry, create_app

    registry = WordRegistry({**DEFAULT_CONFIG, 'distance_threshold': 5.0})
    client = TestClient(create_app(registry))

    client.post('/words/hello')

    assert 'hello' in registry
    with registry.locked('hello') as word:
        assert word.threshold == 5.0


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.json()['status'] == 'ok'
    assert response.json()['words'] == 0


def test_create_is_idempotent(client):
    first = client.post('/words/hello', json={'version': '2'})
    second = client.post('/words/hello')

    assert first.status_code == 200
    assert first.json()['version'] == '2'
    assert second.json()['registered'] == first.json()['registered']
    assert client.get('/health').json()['words'] == 1


def test_train_and_evaluate(client):
    client.post('/words/hello')

    trained = client.post('/words/hello/model', json={'features': ZEROS, 'recorder': 'anna'})
    assert trained.status_code == 200
    assert trained.json()['node'] == 1

    good = client.post('/words/hello/evaluate', json={'features': ZEROS})
    assert good.status_code == 200
    assert good.json()['classification'] == 'success'
    assert good.json()['model_distance'] == 0.0
    assert good.json()['backtracking_path'] is None

    bad = client.post('/words/hello/evaluate', json={'features': OFFSET, 'descriptions': ['too loud']})
    report = bad.json()
    assert report['classification'] == 'failure'
    assert report['model_distance'] == pytest.approx(212.132, abs=1e-3)
    assert report['backtracking_path']['clusters'] == [
        report['characteristics']['analyzed'],
        good.json()['characteristics']['analyzed'],
    ]
    assert report['target_group'] == 'success'
    assert 'duration' in report


def test_unknown_word(client):
    assert client.post('/words/nope/model', json={'features': ZEROS}).status_code == 404
    assert client.post('/words/nope/evaluate', json={'features': ZEROS}).status_code == 404
    assert client.get('/words/nope/status').status_code == 404


def test_invalid_features(client):
    client.post('/words/hello')

    ragged = client.post('/words/hello/evaluate', json={'features': [[1.0, 2.0], [3.0]]})
    empty = client.post('/words/hello/model', json={'features': []})

    assert ragged.status_code == 422
    assert empty.status_code == 422


def test_status(client):
    client.post('/words/hello')
    client.post('/words/hello/model', json={'features': ZEROS})
    client.post('/words/hello/evaluate', json={'features': OFFSET})

    status = client.get('/words/hello/status').json()

    assert status['name'] == 'hello'
    assert status['groups']['model']['nodes'] == 1
    assert status['groups']['success']['nodes'] == 0
    assert status['groups']['failure']['clusters'] == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
