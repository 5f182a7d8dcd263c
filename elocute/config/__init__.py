"""
ELOCUTE Configuration
=====================

YAML overrides on top of DEFAULT_CONFIG, validated before use.

Example config.yaml:
    distance_threshold: 250.0
    correction_penalty: 1.0
    close_fraction: 0.3
    sample_rate: 16000
    feature_cache_dir: ./data
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from elocute.config.validator import (
    ConfigurationError,
    REQUIRED_FIELDS,
    validate_ranges,
    validate_required,
    validate_stage,
)

DEFAULT_CONFIG = {
    'distance_threshold': 250.0,
    'correction_penalty': 1.0,
    'close_fraction': 0.3,
    'sample_rate': 16000,
    'n_mfcc': 13,
    'n_fft': 400,
    'hop_length': 160,
    'feature_cache_dir': './data',
    'max_workers': 2,
}


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration.

    Args:
        config_path: YAML file; DEFAULT_CONFIG alone when None

    Raises:
        ConfigurationError: If the file is missing, not a mapping, or any
            value is invalid
    """
    config = DEFAULT_CONFIG.copy()

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            user_config = yaml.safe_load(f) or {}

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Config must be a mapping: {config_path}")

        unknown = sorted(set(user_config) - set(DEFAULT_CONFIG))
        if unknown:
            raise ConfigurationError(f"Unknown config keys in {config_path}: {', '.join(unknown)}")

        config.update(user_config)

    for stage in REQUIRED_FIELDS:
        validate_stage(config, stage, config_path)

    return config


__all__ = [
    'ConfigurationError',
    'DEFAULT_CONFIG',
    'load_config',
    'validate_ranges',
    'validate_required',
    'validate_stage',
]
