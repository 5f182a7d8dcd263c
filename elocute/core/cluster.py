"""
Clusters
========

A Cluster is a mutable set of attempts represented by its medoid. A
ClusterGroup partitions every attempt it has ever been given into
clusters by threshold admission:

    nearest cluster within DISTANCE_THRESHOLD  ->  join it
    otherwise                                  ->  new singleton cluster

Cluster-to-cluster distance is always centroid-to-centroid, measured
through the shared node cache, so growing a cluster never triggers a new
DTW computation for pairs already seen.
"""

import logging
from typing import Iterator, List, Optional, Tuple

import numpy as np

from elocute.core.distance_cache import DistanceCache
from elocute.core.measurable import IdAllocator
from elocute.core.node import Node
from elocute.engines.core import clustering

logger = logging.getLogger(__name__)


# Maximum DTW distance at which two attempts count as the same pattern.
# Shared by cluster admission and success/failure classification.
DISTANCE_THRESHOLD = 250.0


class Cluster:
    """
    Group of attempts sharing the distance cache of their group.

    Centroid, description density and cohesion are cached and rebuilt on
    the first read after a change.
    """

    def __init__(self, group: 'ClusterGroup', uid: Optional[int] = None):
        self.group = group
        self.uid = uid if uid is not None else group.ids.next()
        self.nodes: List[Node] = []
        self._revision = 0
        self._dirty = True
        self._centroid: Optional[Node] = None
        self._description_density = 0.0
        self._cohesion = 0.0

    @property
    def revision(self) -> int:
        return self._revision

    def add(self, node: Node) -> None:
        self.nodes.append(node)
        self.invalidate()

    def invalidate(self) -> None:
        """Mark cached values stale, e.g. after describing a member."""
        self._revision += 1
        self._dirty = True

    def _refresh(self) -> None:
        if not self._dirty:
            return

        if not self.nodes:
            raise ValueError(f"Cluster {self.uid} has no members")

        cache = self.group.nodes
        k = len(self.nodes)
        distances = np.zeros((k, k))
        for i in range(k):
            for j in range(i + 1, k):
                distances[i, j] = distances[j, i] = cache.distance(self.nodes[i], self.nodes[j])

        centroid_idx = clustering.medoid_index(distances, [n.uid for n in self.nodes])

        self._centroid = self.nodes[centroid_idx]
        self._cohesion = float(np.mean(distances[centroid_idx]))
        self._description_density = sum(1 for n in self.nodes if n.descriptions) / k
        self._dirty = False

    @property
    def centroid(self) -> Node:
        """Medoid member; ties broken by lowest id."""
        self._refresh()
        return self._centroid

    @property
    def description_density(self) -> float:
        """Share of members carrying at least one description."""
        self._refresh()
        return self._description_density

    @property
    def average_centroid_distance(self) -> float:
        """Mean member-to-centroid distance (cohesion)."""
        self._refresh()
        return self._cohesion

    @property
    def descriptions(self) -> List[str]:
        return [text for node in self.nodes for text in node.descriptions]

    def distance(self, other: 'Cluster') -> float:
        return self.group.nodes.distance(self.centroid, other.centroid)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __contains__(self, node) -> bool:
        return node in self.nodes

    def __eq__(self, other) -> bool:
        if not isinstance(other, Cluster):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self) -> int:
        return hash(self.uid)

    def __repr__(self) -> str:
        return f"Cluster(uid={self.uid}, size={len(self.nodes)})"


class ClusterGroup:
    """
    Threshold-admission partition of attempts.

    Args:
        nodes: Node distance cache, usually shared by all groups of a Word
        threshold: Admission threshold T
        ids: Cluster id allocator. Groups whose clusters are compared with
            each other must share one.
    """

    def __init__(
        self,
        nodes: DistanceCache[Node],
        threshold: float = DISTANCE_THRESHOLD,
        ids: Optional[IdAllocator] = None,
    ):
        self.nodes = nodes
        self.threshold = threshold
        self.ids = ids if ids is not None else IdAllocator()
        self.clusters: DistanceCache[Cluster] = DistanceCache(threshold=threshold)
        self.members: List[Node] = []

    def add(self, node: Node) -> Cluster:
        """
        Put a node into the partition.

        Returns:
            The cluster the node now belongs to
        """
        self.nodes.register(node)
        self.members.append(node)

        singleton = node.as_cluster(self)
        found = self.clusters.nearest_with_distance(singleton)

        if found is not None and found[1] <= self.threshold:
            cluster, d = found
            self.clusters.forget(singleton)
            cluster.add(node)
            logger.debug(f"node {node.uid} joined cluster {cluster.uid} (d={d:.3f})")
            return cluster

        self.clusters.register(singleton)
        logger.debug(f"node {node.uid} opened cluster {singleton.uid}")
        return singleton

    def find_closest(self, node: Node) -> Optional[Tuple[Cluster, float]]:
        """Nearest cluster to a node without adding it. None if the group is empty."""
        probe = node.as_cluster(self)
        found = self.clusters.nearest_with_distance(probe)
        self.clusters.forget(probe)
        return found

    def closest_cluster(self, cluster: Cluster) -> Optional[Cluster]:
        return self.clusters.nearest(cluster)

    def close_clusters(self, cluster: Cluster, fraction: float) -> List[Cluster]:
        return self.clusters.close_band(cluster, fraction)

    def cluster_of(self, node: Node) -> Optional[Cluster]:
        for cluster in self.clusters.elements:
            if node in cluster:
                return cluster
        return None

    @property
    def cluster_list(self) -> List[Cluster]:
        return self.clusters.elements

    def davies_bouldin_index(self) -> float:
        """Clustering quality, lower is better. Reporting only."""
        clusters = self.cluster_list
        k = len(clusters)

        separations = np.zeros((k, k))
        for i in range(k):
            for j in range(i + 1, k):
                separations[i, j] = separations[j, i] = self.clusters.distance(clusters[i], clusters[j])

        return clustering.davies_bouldin(
            [c.average_centroid_distance for c in clusters],
            separations,
        )

    def __len__(self) -> int:
        return len(self.clusters)

    def __iter__(self) -> Iterator[Cluster]:
        return iter(self.cluster_list)
