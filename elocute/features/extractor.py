"""
Feature Extractor
=================

Decoded audio -> (n_frames, n_mfcc) MFCC matrix.

Extraction runs on a worker pool and reports through a completion
callback. Failures of the job or the callback are logged here and never
reach the clustering core: a failed job simply never calls back.

Usage:
    with FeatureExtractor(sample_rate=16000) as extractor:
        future = extractor.process(signal, on_extracted, cache_path='data/7.npy')
        future.result()
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Union

import librosa
import numpy as np

logger = logging.getLogger(__name__)

FeatureCallback = Callable[[np.ndarray], None]


class FeatureExtractor:
    """
    MFCC extraction with optional on-disk caching of the result.

    Args:
        sample_rate: Rate audio is resampled to on load [Hz]
        n_mfcc: Coefficients per frame
        n_fft: FFT window [samples]
        hop_length: Frame step [samples]
        max_workers: Worker threads for asynchronous jobs
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        n_mfcc: int = 13,
        n_fft: int = 400,
        hop_length: int = 160,
        max_workers: int = 2,
    ):
        self.sample_rate = sample_rate
        self.n_mfcc = n_mfcc
        self.n_fft = n_fft
        self.hop_length = hop_length
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='elocute-features')

    @classmethod
    def from_config(cls, config: dict) -> 'FeatureExtractor':
        return cls(
            sample_rate=config['sample_rate'],
            n_mfcc=config['n_mfcc'],
            n_fft=config['n_fft'],
            hop_length=config['hop_length'],
            max_workers=config['max_workers'],
        )

    # -------------------------------------------------------------------------
    # Synchronous primitives
    # -------------------------------------------------------------------------

    def load(self, path: Union[str, Path]) -> np.ndarray:
        """Decode an audio file to a mono signal at ``sample_rate``."""
        audio, _ = librosa.load(str(path), sr=self.sample_rate, mono=True)
        return audio

    def extract(self, signal: np.ndarray, sample_rate: Optional[int] = None) -> np.ndarray:
        """MFCC frames of a signal, one row per frame."""
        signal = np.asarray(signal, dtype=np.float32)
        if signal.size == 0:
            raise ValueError("Cannot extract features from an empty signal")

        mfcc = librosa.feature.mfcc(
            y=signal,
            sr=sample_rate or self.sample_rate,
            n_mfcc=self.n_mfcc,
            n_fft=self.n_fft,
            hop_length=self.hop_length,
        )
        return mfcc.T.astype(np.float64)

    @staticmethod
    def save(features: np.ndarray, path: Union[str, Path]) -> Path:
        """Persist a feature matrix as .npy."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        np.save(path, features)
        return path

    # -------------------------------------------------------------------------
    # Asynchronous jobs
    # -------------------------------------------------------------------------

    def submit(self, job: Callable[[], np.ndarray], on_extracted: FeatureCallback,
               label: str = 'features') -> Future:
        """Run ``job`` on the pool and hand its result to ``on_extracted``."""

        def run() -> Optional[np.ndarray]:
            try:
                features = job()
            except Exception as e:
                logger.error(f"Feature extraction failed for {label}: {e}")
                return None

            try:
                on_extracted(features)
            except Exception as e:
                logger.error(f"Feature callback failed for {label}: {e}")
                return None

            return features

        return self._executor.submit(run)

    def process(
        self,
        signal: np.ndarray,
        on_extracted: FeatureCallback,
        sample_rate: Optional[int] = None,
        cache_path: Optional[Union[str, Path]] = None,
    ) -> Future:
        """
        Extract features asynchronously.

        Args:
            signal: Decoded mono signal
            on_extracted: Called with the feature matrix once ready
            sample_rate: Signal rate, defaults to ``sample_rate``
            cache_path: Where to persist the matrix (.npy), if anywhere
        """

        def job() -> np.ndarray:
            features = self.extract(signal, sample_rate)
            if cache_path is not None:
                self.save(features, cache_path)
                logger.debug(f"Cached {features.shape[0]} frames to {cache_path}")
            return features

        return self.submit(job, on_extracted, label=str(cache_path or 'signal'))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> 'FeatureExtractor':
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
