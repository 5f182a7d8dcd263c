"""
Evaluation Report
=================

Outcome of classifying one attempt against a word.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from elocute.core.cluster import Cluster
from elocute.core.node import Node
from elocute.core.path import CumulativePath


class Classification(str, Enum):
    SUCCESS = 'success'
    FAILURE = 'failure'


@dataclass
class Characteristics:
    """Where the attempt landed relative to known patterns."""
    model: Optional[Cluster] = None
    analyzed: Optional[Cluster] = None
    success: List[Cluster] = field(default_factory=list)
    failure: List[Cluster] = field(default_factory=list)


@dataclass
class EvaluationReport:
    attempt: Node
    classification: Classification
    characteristics: Characteristics = field(default_factory=Characteristics)
    model_distance: float = float('inf')
    backtracking_path: Optional[CumulativePath] = None
    # Group the path ends in: 'success', or 'model' while nothing has succeeded yet
    target_group: Optional[str] = None

    @property
    def classified_as_failure(self) -> bool:
        return self.classification is Classification.FAILURE

    def to_dict(self) -> dict:
        """JSON-ready view: clusters are reported by id."""
        c = self.characteristics
        return {
            'attempt': self.attempt.uid,
            'classification': self.classification.value,
            'model_distance': self.model_distance if self.model_distance != float('inf') else None,
            'characteristics': {
                'model': c.model.uid if c.model is not None else None,
                'analyzed': c.analyzed.uid if c.analyzed is not None else None,
                'success': [cl.uid for cl in c.success],
                'failure': [cl.uid for cl in c.failure],
            },
            'backtracking_path': self.backtracking_path.to_dict() if self.backtracking_path is not None else None,
            'target_group': self.target_group,
        }
