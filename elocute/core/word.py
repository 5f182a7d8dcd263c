"""
Word
====

Everything known about the pronunciation of one vocabulary word.

Three cluster groups share one node distance cache:
    model   - reference pronunciations, grown only by train()
    success - evaluated attempts within the threshold of a model cluster
    failure - evaluated attempts beyond it

An attempt's DTW distance to another attempt is computed once and reused
by all three groups. Each group keeps its own partition.

Not thread-safe: serialize calls on one Word. Distinct Words share no
state.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from elocute.core.cluster import DISTANCE_THRESHOLD, Cluster, ClusterGroup
from elocute.core.distance_cache import DistanceCache
from elocute.core.measurable import IdAllocator
from elocute.core.node import Node, NodeInfo
from elocute.core.path import CORRECTION_PENALTY, CumulativePath
from elocute.core.report import Characteristics, Classification, EvaluationReport

logger = logging.getLogger(__name__)

# Share of the distance distribution reported as "close" clusters
CLOSE_FRACTION = 0.3

GROUPS = ('model', 'success', 'failure')


@dataclass
class WordInfo:
    """Word metadata."""
    version: str = '1'
    registered_date: str = field(default_factory=lambda: datetime.now().isoformat(timespec='seconds'))


class ClusterLayer:
    """The model, success and failure groups of a word."""

    def __init__(self, nodes: DistanceCache[Node], threshold: float, ids: IdAllocator):
        self.model = ClusterGroup(nodes, threshold, ids)
        self.success = ClusterGroup(nodes, threshold, ids)
        self.failure = ClusterGroup(nodes, threshold, ids)

    def groups(self) -> List[Tuple[str, ClusterGroup]]:
        return [(name, getattr(self, name)) for name in GROUPS]


class Word:
    """
    Classifies attempts and plans corrections for one word.

    Usage:
        word = Word('hello')
        word.train(word.create_node(reference_mfcc))

        report = word.evaluate(word.create_node(attempt_mfcc))
        if report.classified_as_failure:
            print(report.backtracking_path)
    """

    def __init__(
        self,
        name: str,
        info: Optional[WordInfo] = None,
        threshold: float = DISTANCE_THRESHOLD,
        penalty: float = CORRECTION_PENALTY,
        close_fraction: float = CLOSE_FRACTION,
    ):
        self.name = name
        self.info = info or WordInfo()
        self.threshold = threshold
        self.penalty = penalty
        self.close_fraction = close_fraction

        self.node_ids = IdAllocator()
        self.cluster_ids = IdAllocator()
        self.nodes: DistanceCache[Node] = DistanceCache(threshold=threshold)
        self.layer = ClusterLayer(self.nodes, threshold, self.cluster_ids)

    @classmethod
    def from_config(cls, name: str, config: Dict[str, Any], info: Optional[WordInfo] = None) -> 'Word':
        return cls(
            name,
            info,
            threshold=config['distance_threshold'],
            penalty=config['correction_penalty'],
            close_fraction=config['close_fraction'],
        )

    def create_node(self, features: Any, info: Optional[NodeInfo] = None) -> Node:
        """Build a node with the next id of this word."""
        return Node(self.node_ids.next(), info, features)

    # -------------------------------------------------------------------------
    # Training and classification
    # -------------------------------------------------------------------------

    def train(self, node: Node) -> Cluster:
        """Add a reference pronunciation to the model group."""
        self.nodes.register(node)
        cluster = self.layer.model.add(node)
        logger.info(f"{self.name}: trained node {node.uid} into model cluster {cluster.uid}")
        return cluster

    def evaluate(self, node: Node) -> EvaluationReport:
        """
        Classify an attempt and record it.

        The attempt joins the success group when its nearest model cluster
        is within the threshold, the failure group otherwise. Failures come
        with the cheapest known correction path.
        """
        # Pre-register: later groups reuse the distances computed here
        self.nodes.register(node)

        found = self.layer.model.find_closest(node)
        closest_model, model_distance = found if found else (None, float('inf'))

        if model_distance > self.threshold:
            classification = Classification.FAILURE
            analyzed = self.layer.failure.add(node)
        else:
            classification = Classification.SUCCESS
            analyzed = self.layer.success.add(node)

        characteristics = Characteristics(
            model=closest_model,
            analyzed=analyzed,
            success=self.layer.success.close_clusters(analyzed, self.close_fraction),
            failure=self.layer.failure.close_clusters(analyzed, self.close_fraction),
        )

        report = EvaluationReport(
            attempt=node,
            classification=classification,
            characteristics=characteristics,
            model_distance=model_distance,
        )

        if report.classified_as_failure:
            path = self.optimal_path_to_success(analyzed)
            report.backtracking_path = path
            if path is not None:
                report.target_group = 'success' if path.end in self.layer.success.clusters else 'model'

        logger.info(
            f"{self.name}: node {node.uid} -> {classification.value} "
            f"(model distance {model_distance:.3f}, cluster {analyzed.uid})"
        )

        return report

    # -------------------------------------------------------------------------
    # Remediation
    # -------------------------------------------------------------------------

    def _closest_target(self, cluster: Cluster) -> Optional[Cluster]:
        target = self.layer.success.closest_cluster(cluster)
        if target is None:
            # No accepted attempt yet: aim at the reference pronunciation
            target = self.layer.model.closest_cluster(cluster)
        return target

    def optimal_path_to_success(self, start: Cluster) -> Optional[CumulativePath]:
        """
        Cheapest path from a failure cluster to the success group.

        Explores every ordering of distinct failure clusters. Exponential
        in the number of failure clusters; subproblems are memoized for the
        duration of one call.

        Returns:
            Path from ``start`` to a success cluster, None if there is
            nowhere to go
        """
        memo: Dict[Tuple[int, FrozenSet[int]], Optional[CumulativePath]] = {}
        return self._optimal_path(start, frozenset(), memo)

    def _optimal_path(
        self,
        start: Cluster,
        excluded: FrozenSet[int],
        memo: Dict[Tuple[int, FrozenSet[int]], Optional[CumulativePath]],
    ) -> Optional[CumulativePath]:
        key = (start.uid, excluded)
        if key in memo:
            return memo[key]

        target = self._closest_target(start)
        if target is None:
            memo[key] = None
            return None

        # This cluster is the last failure before the target
        best = CumulativePath([target], penalty=self.penalty)
        best.add_step_to_front(start)

        sub_excluded = excluded | {start.uid}

        for candidate in self.layer.failure.cluster_list:
            if candidate.uid in sub_excluded:
                continue

            sub = self._optimal_path(candidate, sub_excluded, memo)
            if sub is None:
                continue

            path = sub.prepended(start)
            if path.cost < best.cost:
                best = path

        memo[key] = best
        return best

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def status(self) -> Dict[str, Any]:
        """Diagnostic data points for every group."""
        groups = {}

        for name, group in self.layer.groups():
            groups[name] = {
                'nodes': len(group.members),
                'clusters': len(group),
                'dbi': group.davies_bouldin_index(),
                'cluster_stats': [
                    {
                        'index': index,
                        'uid': cluster.uid,
                        'size': len(cluster),
                        'centroid': cluster.centroid.uid,
                        'description_density': cluster.description_density,
                        'cohesion': cluster.average_centroid_distance,
                    }
                    for index, cluster in enumerate(group.cluster_list)
                ],
            }

        return {
            'name': self.name,
            'version': self.info.version,
            'updated': self.info.registered_date,
            'groups': groups,
        }

    def status_text(self) -> str:
        """Human-readable multi-line summary of status()."""
        status = self.status()

        lines = [
            f"name: {status['name']}",
            f"version: {status['version']}",
            f"updated: {status['updated']}",
        ]

        for name in GROUPS:
            group = status['groups'][name]
            lines.append(f"{name} layer:")
            lines.append(f"    total nodes: {group['nodes']}")
            lines.append(f"    total clusters: {group['clusters']}")
            lines.append(f"    dbi: {group['dbi']:.4f}")

            for stats in group['cluster_stats']:
                lines.append(f"    cluster#{stats['index']}:")
                lines.append(f"        size: {stats['size']}")
                lines.append(f"        centroid: {stats['centroid']}")
                lines.append(f"        dd: {stats['description_density']:.3f}")
                lines.append(f"        acd: {stats['cohesion']:.3f}")

        return '\n'.join(lines) + '\n'

    def __repr__(self) -> str:
        sizes = ', '.join(f"{name}={len(group)}" for name, group in self.layer.groups())
        return f"Word({self.name!r}, {sizes})"
