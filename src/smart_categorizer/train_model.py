"""Train the ML classifier on the built-in corpus and write the model blob."""
import argparse
import os
import sys

from smart_categorizer.catalog.training_data import category_counts, generate_training_data
from smart_categorizer.classifiers.ml import MLClassifier
from smart_categorizer.core import settings
from smart_categorizer.errors import TrainingError
from smart_categorizer.logger import get_logger, setup_logging

logger = get_logger(__name__)


def run(output: str) -> bool:
    samples = generate_training_data()
    print(f"Generated {len(samples)} training samples")
    print("Samples per category:")
    for category_id, count in category_counts(samples):
        print(f"  - {category_id}: {count}")

    classifier = MLClassifier()
    try:
        classifier.train(samples)
    except TrainingError as exc:
        logger.error("Training failed: %s", exc)
        return False

    print(f"Vocabulary size: {classifier.vocabulary_size()} terms")
    print(f"Number of classes: {classifier.num_classes()}")

    blob = classifier.to_bytes()
    if blob is None:
        logger.error("Classifier produced no model")
        return False

    settings.ensure_dir(os.path.dirname(output))
    with open(output, "wb") as f:
        f.write(blob)
    print(f"Model saved to {output} ({len(blob) / 1024:.1f} KB)")
    return True


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Train the transaction categorization model")
    parser.add_argument(
        "--output",
        default=os.path.join(settings.DATA_DIR, settings.MODEL_FILENAME),
        help="Where to write the model file",
    )
    args = parser.parse_args()

    setup_logging()
    success = run(args.output)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
