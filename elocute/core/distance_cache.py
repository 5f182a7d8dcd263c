"""
Distance Cache
==============

Memoizes pairwise distances between measurable entities and answers
neighborhood queries over the registered ones.

Every pair is computed at most once per pair of revisions. Nodes never
change revision, so an attempt's DTW distance to another attempt is
computed exactly once no matter how many groups or queries need it.

Usage:
    cache = DistanceCache(threshold=250.0)
    cache.register(a)
    cache.register(b)

    cache.distance(a, b)          # computed
    cache.distance(b, a)          # cached
    cache.nearest(query)          # None if nothing else is registered
    cache.close_band(query, 0.3)  # threshold band U gaussian quantile band
"""

import logging
from typing import Dict, Generic, List, Optional, Set, Tuple

import numpy as np
from scipy.stats import norm

from elocute.core.measurable import T

logger = logging.getLogger(__name__)


class DistanceCache(Generic[T]):
    """
    Symmetric memo of distances between registered entities.

    Args:
        threshold: Admission threshold; entities at or below it are always
            part of a close band. None disables threshold admission.
    """

    def __init__(self, threshold: Optional[float] = None):
        self.threshold = threshold
        self._elements: Dict[int, T] = {}
        self._pairs: Dict[Tuple[int, int], Tuple[Tuple[int, int], float]] = {}
        self._pairs_by_uid: Dict[int, Set[Tuple[int, int]]] = {}
        self.computations = 0

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, element: T) -> None:
        """Make an element visible to future queries. Nothing is computed."""
        self._elements[element.uid] = element

    def forget(self, element: T) -> None:
        """Drop an element and every cached pair that involves it."""
        self._elements.pop(element.uid, None)

        for key in self._pairs_by_uid.pop(element.uid, set()):
            self._pairs.pop(key, None)
            other = key[0] if key[1] == element.uid else key[1]
            if other in self._pairs_by_uid:
                self._pairs_by_uid[other].discard(key)

    @property
    def elements(self) -> List[T]:
        """Registered elements in registration order."""
        return list(self._elements.values())

    def __contains__(self, element) -> bool:
        return getattr(element, 'uid', None) in self._elements

    def __len__(self) -> int:
        return len(self._elements)

    @property
    def cached_pairs(self) -> int:
        return len(self._pairs)

    # -------------------------------------------------------------------------
    # Distances
    # -------------------------------------------------------------------------

    def distance(self, a: T, b: T) -> float:
        """Cached distance between two entities. distance(a, a) is 0."""
        if a.uid == b.uid:
            return 0.0

        # Always compute from the lower id so both call orders agree exactly
        lo, hi = (a, b) if a.uid < b.uid else (b, a)
        key = (lo.uid, hi.uid)
        revisions = (lo.revision, hi.revision)

        hit = self._pairs.get(key)
        if hit is not None and hit[0] == revisions:
            return hit[1]

        d = float(lo.distance(hi))
        self.computations += 1

        self._pairs[key] = (revisions, d)
        self._pairs_by_uid.setdefault(lo.uid, set()).add(key)
        self._pairs_by_uid.setdefault(hi.uid, set()).add(key)

        return d

    def distances_to(self, query: T) -> List[Tuple[T, float]]:
        """Distance from the query to every other registered element."""
        return [
            (element, self.distance(query, element))
            for uid, element in self._elements.items()
            if uid != query.uid
        ]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def nearest_with_distance(self, query: T) -> Optional[Tuple[T, float]]:
        """Closest other registered element and its distance, ties by lowest id."""
        candidates = self.distances_to(query)
        if not candidates:
            return None

        return min(candidates, key=lambda pair: (pair[1], pair[0].uid))

    def nearest(self, query: T) -> Optional[T]:
        """Closest other registered element, or None if there is none."""
        found = self.nearest_with_distance(query)
        return found[0] if found else None

    def quantile_cutoff(self, distances: np.ndarray, fraction: float) -> float:
        """
        Distance below which the closest ``fraction`` of a normal fit lies.

        The fit uses the mean and (population) standard deviation of the
        finite distances. A degenerate fit collapses to the mean.
        """
        finite = distances[np.isfinite(distances)]
        if len(finite) == 0:
            return -np.inf

        mu = float(np.mean(finite))
        sigma = float(np.std(finite))

        if sigma == 0:
            return mu

        return float(norm.ppf(fraction, loc=mu, scale=sigma))

    def close_band(self, query: T, fraction: float) -> List[T]:
        """
        Elements close to the query.

        Union of the elements within the admission threshold and the
        elements inside the closest ``fraction`` of the query's distance
        distribution. Sorted by distance, then id.

        Raises:
            ValueError: If fraction is not in (0, 1]
        """
        if not 0 < fraction <= 1:
            raise ValueError(f"fraction must be in (0, 1], got {fraction}")

        candidates = self.distances_to(query)
        if not candidates:
            return []

        distances = np.array([d for _, d in candidates])
        cutoff = self.quantile_cutoff(distances, fraction)

        band = [
            (element, d) for element, d in candidates
            if d <= cutoff or (self.threshold is not None and d <= self.threshold)
        ]
        band.sort(key=lambda pair: (pair[1], pair[0].uid))

        logger.debug(
            f"close band: {len(band)}/{len(candidates)} "
            f"(cutoff={cutoff:.3f}, threshold={self.threshold})"
        )

        return [element for element, _ in band]
