"""
Node Loader
===========

Source file -> Node, asynchronously.

Supported formats:
    .wav, .flac  raw audio; decoded, MFCC-extracted, cached as <uid>.npy
    .npy         pre-extracted feature matrix

Any other extension is reported and yields no node.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

import numpy as np

from elocute.core.measurable import IdAllocator
from elocute.core.node import Node, NodeInfo
from elocute.features.extractor import FeatureExtractor

logger = logging.getLogger(__name__)

RAW_FORMATS = {'.wav', '.flac'}
FEATURE_FORMATS = {'.npy'}

NodeCallback = Callable[[Node], None]


def node_from_file(
    source: Union[str, Path],
    on_ready: NodeCallback,
    ids: IdAllocator,
    info: Optional[NodeInfo] = None,
    extractor: Optional[FeatureExtractor] = None,
    cache_dir: Union[str, Path] = './data',
):
    """
    Build a node from a file once its features are available.

    Args:
        source: Audio or feature file
        on_ready: Called with the node when extraction completes
        ids: Allocator for the node id
        info: Recording metadata; the recorded date defaults to now
        extractor: Extractor to run on, a default one otherwise
        cache_dir: Where raw audio features are persisted

    Returns:
        Future of the extraction job, or None for an unsupported format
    """
    source = Path(source)
    extension = source.suffix.lower()

    if extension not in RAW_FORMATS | FEATURE_FORMATS:
        logger.warning(f"{extension or '(no extension)'} is an unsupported format: {source}")
        return None

    if info is None:
        info = NodeInfo(recorded_date=datetime.now().isoformat(sep=' ', timespec='seconds'))
    info.source = source

    uid = ids.next()
    extractor = extractor or FeatureExtractor()

    def deliver(features: np.ndarray) -> None:
        try:
            node = Node(uid, info, features)
        except ValueError as e:
            logger.error(f"Rejected features from {source}: {e}")
            return
        on_ready(node)

    if extension in FEATURE_FORMATS:
        return extractor.submit(lambda: np.load(source), deliver, label=str(source))

    # Processed features are stored where later sessions can reuse them
    cache_path = Path(cache_dir) / f"{uid}.npy"

    def job() -> np.ndarray:
        features = extractor.extract(extractor.load(source))
        extractor.save(features, cache_path)
        info.source = cache_path
        return features

    return extractor.submit(job, deliver, label=str(source))


def load_node(
    source: Union[str, Path],
    ids: IdAllocator,
    info: Optional[NodeInfo] = None,
    extractor: Optional[FeatureExtractor] = None,
    cache_dir: Union[str, Path] = './data',
) -> Optional[Node]:
    """Blocking variant of node_from_file. None if no node was produced."""
    if extractor is None:
        with FeatureExtractor() as own:
            return load_node(source, ids, info, own, cache_dir)

    ready: List[Node] = []

    future = node_from_file(source, ready.append, ids, info, extractor, cache_dir)
    if future is None:
        return None

    future.result()
    return ready[0] if ready else None
