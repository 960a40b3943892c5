"""Command-line entry point: classify transactions stored as JSON."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .classifier import ClassificationEngine, RegistryLoadError, receipt_from_rpc, transaction_from_rpc
from .classifier.metrics import metrics
from .classifier.models import ClassificationResult
from .config import load_config, validate_config
from .formatters import ResultFormatter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_REGISTRY_ERROR = 3


def setup_logging(level: str = "INFO") -> None:
    numeric = logging.getLevelName(level)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="txclassifier",
        description="Classify blockchain transactions from JSON files.",
    )
    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="JSON files, each holding {transaction, receipt} or a list of them",
    )
    parser.add_argument("--json", action="store_true", help="Emit one JSON object per transaction")
    parser.add_argument("--debug", action="store_true", help="Include per-detector trace")
    parser.add_argument("--registry", type=Path, help="Registry overlay YAML (overrides REGISTRY_FILE)")
    parser.add_argument("--stats", action="store_true", help="Print classification metrics at the end")
    return parser.parse_args(argv)


def load_documents(path: Path) -> list[dict]:
    """Read a fixture file into a list of {transaction, receipt} documents."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"{path}: expected an object or a list of objects")
    return data


def classify_document(engine: ClassificationEngine, document: dict) -> tuple[str, ClassificationResult]:
    raw_tx = document.get("transaction", document.get("tx"))
    tx = transaction_from_rpc(raw_tx)
    receipt = receipt_from_rpc(document.get("receipt"))
    return tx.hash, engine.classify(tx, receipt)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    config = load_config()
    if args.debug:
        config.debug_trace = True
    if args.registry:
        config.registry_file = args.registry

    setup_logging(config.log_level)

    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error("Config error: %s", error)
        return EXIT_CONFIG_ERROR

    try:
        engine = ClassificationEngine.from_config(config)
    except RegistryLoadError as exc:
        logger.error("Cannot load signal registry: %s", exc)
        return EXIT_REGISTRY_ERROR

    exit_code = EXIT_OK
    results: list[ClassificationResult] = []
    with engine:
        for path in args.files:
            try:
                documents = load_documents(path)
            except (OSError, ValueError) as exc:
                logger.error("Skipping %s: %s", path, exc)
                exit_code = EXIT_INPUT_ERROR
                continue

            for document in documents:
                tx_hash, result = classify_document(engine, document)
                results.append(result)
                if args.json:
                    print(json.dumps({"hash": tx_hash, **result.to_dict()}, sort_keys=True))
                else:
                    print(ResultFormatter.format_result(result, tx_hash))
                    print()

    if not args.json:
        print(ResultFormatter.format_summary(results))
    if args.stats:
        print(json.dumps(metrics.get_summary(), indent=2, sort_keys=True))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
