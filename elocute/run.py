"""
ELOCUTE Runner (CLI wrapper)

Trains a word from reference recordings, evaluates attempts against it
and prints the reports and the word status.

Usage:
    python -m elocute.run --word hello --model ref1.wav ref2.npy --attempt try.wav
    python -m elocute.run --config config.yaml --word hello --model ref.wav --attempt a.wav b.wav
    python -m elocute.run --word hello --model ref.wav --attempt a.wav --output report.json
"""

import argparse
import json
import logging
import sys
from typing import List

from elocute.config import ConfigurationError, load_config
from elocute.core.measurable import IdAllocator
from elocute.core.node import Node
from elocute.core.word import Word
from elocute.engines.core import clustering, dtw
from elocute.features import FeatureExtractor, load_node

logger = logging.getLogger(__name__)


def load_nodes(paths: List[str], ids: IdAllocator, extractor: FeatureExtractor, cache_dir: str) -> List[Node]:
    nodes = []
    for path in paths:
        node = load_node(path, ids, extractor=extractor, cache_dir=cache_dir)
        if node is None:
            logger.warning(f"Skipped {path}")
            continue
        nodes.append(node)
    return nodes


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    parser = argparse.ArgumentParser(description="ELOCUTE Pronunciation Evaluator")
    parser.add_argument("--config", help="Path to config YAML")
    parser.add_argument("--word", required=True, help="Vocabulary word")
    parser.add_argument("--model", nargs="+", required=True, help="Reference recordings (.wav/.flac/.npy)")
    parser.add_argument("--attempt", nargs="*", default=[], help="Attempts to evaluate")
    parser.add_argument("--pairs", action="store_true", help="Print the pairwise DTW table")
    parser.add_argument("--output", help="Write reports and status as JSON")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    word = Word.from_config(args.word, config)

    with FeatureExtractor.from_config(config) as extractor:
        models = load_nodes(args.model, word.node_ids, extractor, config['feature_cache_dir'])
        attempts = load_nodes(args.attempt, word.node_ids, extractor, config['feature_cache_dir'])

    if not models:
        logger.error("No usable reference recordings")
        sys.exit(1)

    for node in models:
        word.train(node)

    print(f"\nELOCUTE: {word.name}")
    print("=" * 60)

    reports = []
    for node in attempts:
        report = word.evaluate(node)
        reports.append(report.to_dict())

        status = "[OK]  " if not report.classified_as_failure else "[FAIL]"
        source = node.info.source.name if node.info.source else node.uid
        print(f"  {status} {source} -> cluster {report.characteristics.analyzed.uid} "
              f"(model distance {report.model_distance:.2f})")
        if report.backtracking_path is not None:
            steps = ' -> '.join(str(c.uid) for c in report.backtracking_path)
            print(f"       correction: {steps} (cost {report.backtracking_path.cost:.2f})")

    print("=" * 60)
    print(word.status_text())

    for name, group in word.layer.groups():
        if len(group):
            print(f"{name} clusters:")
            print(clustering.compute(group.cluster_list).to_string(index=False))

    if args.pairs:
        print(dtw.compute(models + attempts).to_string(index=False))

    if args.output:
        with open(args.output, 'w') as f:
            json.dump({'reports': reports, 'status': word.status()}, f, indent=2)
        logger.info(f"Results saved to: {args.output}")


if __name__ == "__main__":
    main()
