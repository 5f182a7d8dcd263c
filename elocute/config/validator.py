"""
ELOCUTE Configuration Validator

Every key a Word or the feature extractor reads must be present and in
range before either is built. A bad threshold silently changes every
classification, so problems fail loudly here instead.

Usage:
    from elocute.config.validator import ConfigurationError, validate_stage

    validate_stage(config, 'word', config_path)
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional


class ConfigurationError(Exception):
    """
    Bad or incomplete configuration.

    The message names the offending keys and the file they belong in.
    """
    pass


# Keys each component reads
REQUIRED_FIELDS = {
    'word': [
        'distance_threshold',
        'correction_penalty',
        'close_fraction',
    ],
    'features': [
        'sample_rate',
        'n_mfcc',
        'n_fft',
        'hop_length',
        'feature_cache_dir',
        'max_workers',
    ],
}

# Keys that must be strictly positive numbers
POSITIVE_FIELDS = [
    'distance_threshold',
    'correction_penalty',
    'sample_rate',
    'n_mfcc',
    'n_fft',
    'hop_length',
    'max_workers',
]


def _bullets(items: Iterable[str], template: str = '  - {}') -> str:
    return ''.join(template.format(item) + '\n' for item in items)


def _banner(title: str, body: str, config_path: Optional[Path]) -> str:
    rule = '=' * 60
    location = f"File: {config_path}\n" if config_path else ""
    return f"\n{rule}\nCONFIGURATION ERROR: {title}\n{rule}\n{location}{body}{rule}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_required(
    config: Dict[str, Any],
    required_keys: List[str],
    stage: str,
    config_path: Optional[Path] = None,
) -> None:
    """
    Check that every key a component reads is set.

    Args:
        config: Merged configuration
        required_keys: Keys that must be present and not None
        stage: Component name, shown in the message
        config_path: Config file, shown in the message

    Raises:
        ConfigurationError: Listing every missing key with a YAML snippet
            to paste
    """
    missing = [key for key in required_keys if config.get(key) is None]
    if not missing:
        return

    body = (
        f"Component: {stage}\n\n"
        f"Missing fields:\n{_bullets(missing)}\n"
        f"Add to your config.yaml:\n{_bullets(missing, '  {}: <value>')}\n"
    )
    raise ConfigurationError(_banner("Missing required parameters", body, config_path))


def validate_ranges(config: Dict[str, Any], config_path: Optional[Path] = None) -> None:
    """
    Check value ranges of the keys that are present.

    Raises:
        ConfigurationError: If a positive field is not a positive number
            or close_fraction is outside (0, 1]
    """
    problems = [
        f"{key} must be a positive number, got {config[key]!r}"
        for key in POSITIVE_FIELDS
        if key in config and not (_is_number(config[key]) and config[key] > 0)
    ]

    fraction = config.get('close_fraction')
    if fraction is not None and not (_is_number(fraction) and 0 < fraction <= 1):
        problems.append(f"close_fraction must be in (0, 1], got {fraction!r}")

    if problems:
        raise ConfigurationError(_banner("Invalid values", _bullets(problems), config_path))


def validate_stage(config: Dict[str, Any], stage: str, config_path: Optional[Path] = None) -> None:
    """Presence and range checks for one component ('word' or 'features')."""
    if stage not in REQUIRED_FIELDS:
        raise ConfigurationError(f"Unknown component: {stage}")

    validate_required(config, REQUIRED_FIELDS[stage], stage, config_path)
    validate_ranges(config, config_path)
