"""
ELOCUTE Core
============

- node: attempts and their metadata
- distance_cache: memoized pairwise distances and neighborhood queries
- cluster: medoid clusters and threshold-admission groups
- path: modeled correction paths
- word: classification, training, remediation, status
"""

from .measurable import IdAllocator, Measurable
from .node import Node, NodeInfo, validate_features
from .distance_cache import DistanceCache
from .cluster import DISTANCE_THRESHOLD, Cluster, ClusterGroup
from .path import CORRECTION_PENALTY, CumulativePath
from .report import Characteristics, Classification, EvaluationReport
from .word import CLOSE_FRACTION, ClusterLayer, Word, WordInfo

__all__ = [
    'IdAllocator',
    'Measurable',
    'Node',
    'NodeInfo',
    'validate_features',
    'DistanceCache',
    'DISTANCE_THRESHOLD',
    'Cluster',
    'ClusterGroup',
    'CORRECTION_PENALTY',
    'CumulativePath',
    'Characteristics',
    'Classification',
    'EvaluationReport',
    'CLOSE_FRACTION',
    'ClusterLayer',
    'Word',
    'WordInfo',
]
