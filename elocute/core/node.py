"""
Node
====

One pronunciation attempt: an immutable feature matrix plus metadata.

Identity is the ``uid`` only. Two nodes with identical features but
different ids are different attempts.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import numpy as np

from elocute.engines.core import dtw


@dataclass
class NodeInfo:
    """Metadata about the recording behind a node."""
    source: Optional[Path] = None
    recorder: str = 'unknown'
    recorder_age: str = 'unknown'
    recorder_sex: str = 'unknown'
    recorded_date: str = 'unknown'

    def to_dict(self) -> dict:
        return {
            'source': str(self.source) if self.source else None,
            'recorder': self.recorder,
            'recorder_age': self.recorder_age,
            'recorder_sex': self.recorder_sex,
            'recorded_date': self.recorded_date,
        }


def validate_features(features: Any) -> np.ndarray:
    """
    Coerce a feature sequence into a read-only (n_frames, n_dims) array.

    Raises:
        ValueError: If the sequence is empty, ragged, not 2-D, has
            zero-width frames or contains non-finite values
    """
    try:
        matrix = np.array(features, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Feature sequence is ragged or not numeric: {e}")

    if matrix.ndim != 2:
        raise ValueError(f"Feature sequence must be 2-D (frames x dims), got {matrix.ndim}-D")

    if matrix.shape[0] == 0:
        raise ValueError("Feature sequence has no frames")

    if matrix.shape[1] == 0:
        raise ValueError("Feature frames have zero dimensions")

    if not np.all(np.isfinite(matrix)):
        raise ValueError("Feature sequence contains non-finite values")

    matrix.flags.writeable = False
    return matrix


class Node:
    """
    A single attempt at pronouncing a word.

    Usage:
        node = Node(ids.next(), NodeInfo(recorder='anna'), mfcc.T)
        node.describe('dropped final consonant')
        d = node.distance(other)
    """

    revision = 0

    def __init__(self, uid: int, info: Optional[NodeInfo], features: Any):
        self.uid = uid
        self.info = info or NodeInfo()
        self.features = validate_features(features)
        self.descriptions: List[str] = []

    def describe(self, text: str) -> None:
        """Attach a free-text description. Repeats are ignored."""
        if text not in self.descriptions:
            self.descriptions.append(text)

    def distance(self, other: 'Node') -> float:
        """DTW on the time axis, Euclidean on the feature axis."""
        return dtw.distance(self.features, other.features)

    def cost_path(self, other: 'Node') -> np.ndarray:
        return dtw.cost_path(self.features, other.features)

    def as_cluster(self, group):
        """Singleton cluster holding only this node, scoped to ``group``."""
        from elocute.core.cluster import Cluster

        cluster = Cluster(group)
        cluster.add(self)
        return cluster

    @property
    def n_frames(self) -> int:
        return self.features.shape[0]

    @property
    def n_dims(self) -> int:
        return self.features.shape[1]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self) -> int:
        return hash(self.uid)

    def __repr__(self) -> str:
        return f"Node(uid={self.uid}, frames={self.n_frames}, dims={self.n_dims})"
