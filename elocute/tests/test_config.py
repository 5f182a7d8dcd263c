"""
Test Configuration
==================
"""

import pytest


def test_defaults():
    from elocute.config import DEFAULT_CONFIG, load_config

    config = load_config()

    assert config == DEFAULT_CONFIG
    assert config['distance_threshold'] == 250.0
    assert config['correction_penalty'] == 1.0
    assert config['close_fraction'] == 0.3


def test_yaml_override(tmp_path):
    from elocute.config import load_config

    path = tmp_path / 'config.yaml'
    path.write_text("distance_threshold: 120.5\nsample_rate: 22050\n")

    config = load_config(path)

    assert config['distance_threshold'] == 120.5
    assert config['sample_rate'] == 22050
    assert config['n_mfcc'] == 13


def test_empty_file_uses_defaults(tmp_path):
    from elocute.config import DEFAULT_CONFIG, load_config

    path = tmp_path / 'config.yaml'
    path.write_text("")

    assert load_config(path) == DEFAULT_CONFIG


def test_missing_file(tmp_path):
    from elocute.config import ConfigurationError, load_config

    with pytest.raises(ConfigurationError, match='not found'):
        load_config(tmp_path / 'nope.yaml')


def test_not_a_mapping(tmp_path):
    from elocute.config import ConfigurationError, load_config

    path = tmp_path / 'config.yaml'
    path.write_text("- 1\n- 2\n")

    with pytest.raises(ConfigurationError, match='mapping'):
        load_config(path)


def test_unknown_key(tmp_path):
    from elocute.config import ConfigurationError, load_config

    path = tmp_path / 'config.yaml'
    path.write_text("distance_treshold: 3.0\n")

    with pytest.raises(ConfigurationError, match='distance_treshold'):
        load_config(path)


def test_negative_threshold(tmp_path):
    from elocute.config import ConfigurationError, load_config

    path = tmp_path / 'config.yaml'
    path.write_text("distance_threshold: -1\n")

    with pytest.raises(ConfigurationError, match='distance_threshold must be a positive number'):
        load_config(path)


def test_close_fraction_range(tmp_path):
    from elocute.config import ConfigurationError, load_config

    path = tmp_path / 'config.yaml'
    path.write_text("close_fraction: 1.5\n")

    with pytest.raises(ConfigurationError, match='close_fraction'):
        load_config(path)


def test_validate_required_message():
    from elocute.config import ConfigurationError, validate_required

    with pytest.raises(ConfigurationError) as e:
        validate_required({'distance_threshold': None}, ['distance_threshold', 'close_fraction'], 'word')

    message = str(e.value)
    assert 'Component: word' in message
    assert '  - distance_threshold' in message
    assert '  close_fraction: <value>' in message


def test_unknown_stage():
    from elocute.config import ConfigurationError, validate_stage

    with pytest.raises(ConfigurationError):
        validate_stage({}, 'server')


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
