"""
Word Registry Handler
=====================

Holds the Words served over HTTP. The core has no locking, so every Word
gets its own lock here: one call in flight per Word, distinct Words in
parallel.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from elocute.config import DEFAULT_CONFIG
from elocute.core.node import NodeInfo
from elocute.core.word import Word, WordInfo

logger = logging.getLogger(__name__)


class WordRegistry:
    """
    Named Words, each guarded by a lock.

    Usage:
        registry = WordRegistry(config)
        registry.create('hello')
        report = registry.evaluate('hello', features)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else DEFAULT_CONFIG.copy()
        self._words: Dict[str, Word] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def create(self, name: str, version: str = '1') -> Word:
        """Create a word, or return the existing one of that name."""
        with self._registry_lock:
            if name not in self._words:
                self._words[name] = Word.from_config(name, self.config, WordInfo(version=version))
                self._locks[name] = threading.Lock()
                logger.info(f"Registered word '{name}'")
            return self._words[name]

    @contextmanager
    def locked(self, name: str) -> Iterator[Word]:
        """
        Exclusive access to a word.

        Raises:
            KeyError: If the word is unknown
        """
        with self._registry_lock:
            if name not in self._words:
                raise KeyError(name)
            word, lock = self._words[name], self._locks[name]

        with lock:
            yield word

    def train(self, name: str, features: List[List[float]], info: Optional[NodeInfo] = None) -> Dict[str, Any]:
        with self.locked(name) as word:
            node = word.create_node(features, info)
            cluster = word.train(node)
            return {'node': node.uid, 'cluster': cluster.uid}

    def evaluate(self, name: str, features: List[List[float]], info: Optional[NodeInfo] = None,
                 descriptions: Optional[List[str]] = None) -> Dict[str, Any]:
        with self.locked(name) as word:
            node = word.create_node(features, info)
            for text in descriptions or []:
                node.describe(text)
            return word.evaluate(node).to_dict()

    def status(self, name: str) -> Dict[str, Any]:
        with self.locked(name) as word:
            return word.status()

    def names(self) -> List[str]:
        with self._registry_lock:
            return sorted(self._words)

    def __contains__(self, name: str) -> bool:
        return name in self._words

    def __len__(self) -> int:
        return len(self._words)
