"""
ELOCUTE - Pronunciation Attempt Clustering
==========================================

Classifies a pronunciation attempt against every earlier attempt at the
same word and, when it fails, plans a correction path through known
defects toward an accepted pronunciation.

    FEATURES IN → DTW → CLUSTERS → SUCCESS / FAILURE + PATH

Architecture:
    - engines/: Irreducible algorithms (dtw, medoids, davies-bouldin)
    - core/: Nodes, distance cache, clusters, words
    - features/: Audio decoding and MFCC extraction
    - server/: HTTP handlers

Usage:
    # Start server
    uvicorn elocute.server.routes:app --host 0.0.0.0 --port 8080

    # Or the CLI
    python -m elocute.run --word hello --model ref1.wav ref2.wav --attempt try.wav
"""

__version__ = "1.0.0"

from . import engines
from . import core

__all__ = ['engines', 'core', '__version__']
