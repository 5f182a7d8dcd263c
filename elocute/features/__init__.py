"""
ELOCUTE Feature Extraction
==========================

- extractor: decoded audio -> MFCC frames, asynchronous with callbacks
- loader: source files -> Nodes
"""

from .extractor import FeatureExtractor
from .loader import FEATURE_FORMATS, RAW_FORMATS, load_node, node_from_file

__all__ = [
    'FeatureExtractor',
    'FEATURE_FORMATS',
    'RAW_FORMATS',
    'load_node',
    'node_from_file',
]
