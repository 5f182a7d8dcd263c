"""
ELOCUTE Engines
===============

Irreducible algorithms over feature sequences and distance matrices.

Core: DTW alignment, medoids, cluster quality
"""

from . import core

__all__ = ['core']
