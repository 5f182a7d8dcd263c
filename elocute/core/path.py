"""
Cumulative Path
===============

Ordered walk over clusters with a modeled correction cost:

    cost = P * sqrt(hops) * max(hop distances)

The worst single hop dominates; every extra hop is penalized by the
square root of the hop count.
"""

import math
from typing import Iterator, List, Optional

from elocute.core.cluster import Cluster

# Correction penalty constant P
CORRECTION_PENALTY = 1.0


class CumulativePath:
    """
    Path of clusters, cost recomputed on every change.

    Usage:
        path = CumulativePath()
        path.add_step(target)
        path.add_step_to_front(start)
        path.cost
    """

    def __init__(self, steps: Optional[List[Cluster]] = None, penalty: float = CORRECTION_PENALTY):
        self.steps: List[Cluster] = list(steps or [])
        self.penalty = penalty
        self._cost = self._compute_cost()

    def add_step(self, cluster: Cluster) -> None:
        self.steps.append(cluster)
        self._cost = self._compute_cost()

    def add_step_to_front(self, cluster: Cluster) -> None:
        self.steps.insert(0, cluster)
        self._cost = self._compute_cost()

    def prepended(self, cluster: Cluster) -> 'CumulativePath':
        """New path with ``cluster`` in front; this one is left untouched."""
        return CumulativePath([cluster] + self.steps, penalty=self.penalty)

    def hop_distances(self) -> List[float]:
        return [a.distance(b) for a, b in zip(self.steps, self.steps[1:])]

    def _compute_cost(self) -> float:
        hops = self.hop_distances()
        if not hops:
            return 0.0
        return self.penalty * math.sqrt(len(hops)) * max(hops)

    @property
    def cost(self) -> float:
        return self._cost

    @property
    def start(self) -> Optional[Cluster]:
        return self.steps[0] if self.steps else None

    @property
    def end(self) -> Optional[Cluster]:
        return self.steps[-1] if self.steps else None

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Cluster]:
        return iter(self.steps)

    def to_dict(self) -> dict:
        return {
            'clusters': [c.uid for c in self.steps],
            'centroids': [c.centroid.uid for c in self.steps],
            'cost': self.cost if math.isfinite(self.cost) else None,
        }

    def __repr__(self) -> str:
        return f"CumulativePath({[c.uid for c in self.steps]}, cost={self.cost:.3f})"
