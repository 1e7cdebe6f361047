#!/usr/bin/env python3
"""
Vagueness model training script for Promptsmith
Trains the classifier on the bundled seed prompts (or a JSON file of
labelled prompts) and writes the model blob to the model store.
"""

import json
import sys
from pathlib import Path

from promptsmith.config.settings import settings
from promptsmith.services.vagueness_classification import (
    LabeledPrompt,
    VaguenessService,
    generate_seed_dataset
)
from promptsmith.services.vagueness_classification.learning.model_store import ModelStore
from promptsmith.services.vagueness_classification.models import TrainingConfig

SAMPLE_PROMPTS = [
    "fix it",
    "make it better",
    "add a login form with email validation to src/components/LoginForm.tsx",
    "Fix the TypeError in src/api/users.ts where user.id is undefined after fetchUser returns",
]


def load_examples(path: Path):
    """Read labelled prompts from a JSON list"""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    return [
        LabeledPrompt(
            prompt=item["prompt"],
            vagueness_score=int(item["vagueness_score"]),
            intent=item.get("intent", "unknown"),
            missing_elements=list(item.get("missing_elements", []))
        )
        for item in raw
    ]


def train(args) -> bool:
    store = ModelStore(args.output)
    service = VaguenessService(
        threshold=settings.VAGUENESS_THRESHOLD,
        training_config=TrainingConfig(
            learning_rate=args.learning_rate,
            epochs=args.epochs,
            regularization=args.regularization
        )
    )

    examples = load_examples(Path(args.data)) if args.data else generate_seed_dataset()
    print(f"Training on {len(examples)} labelled prompts...")

    result = service.train_model(examples)
    if not result.success:
        print(f"✗ Training failed: {result.error}")
        return False

    print(f"✓ Samples used: {result.samples_used}")
    print(f"✓ Vocabulary size: {result.vocabulary_size}")
    print(f"✓ Final loss: {result.final_loss:.4f}")

    service.save_model(store)
    print(f"✅ Model written to {store.path}")

    print("\nSample scores:")
    for prompt in SAMPLE_PROMPTS:
        analysis = service.analyze_vagueness(prompt)
        print(f"  {analysis.score:>3} [{analysis.source.value:6}] {prompt}")

    return True


def info(args) -> bool:
    store = ModelStore(args.output)
    service = VaguenessService(threshold=settings.VAGUENESS_THRESHOLD)
    if not service.load_model(store):
        print(f"✗ No stored model at {store.path}")
        return False

    for key, value in service.get_model_info().items():
        print(f"{key:16} {value}")
    return True


def main():
    """Main function"""
    import argparse

    parser = argparse.ArgumentParser(description="Train the Promptsmith vagueness model")
    parser.add_argument("action", choices=["train", "info"], help="Action to perform")
    parser.add_argument("--data", type=str, help="JSON file of labelled prompts (defaults to bundled seed set)")
    parser.add_argument("--output", type=str, default=settings.MODEL_STORE_PATH, help="Model file path")
    parser.add_argument("--epochs", type=int, default=TrainingConfig.epochs)
    parser.add_argument("--learning-rate", type=float, default=TrainingConfig.learning_rate)
    parser.add_argument("--regularization", type=float, default=TrainingConfig.regularization)

    args = parser.parse_args()

    print("🤖 Promptsmith - Vagueness Model Trainer")
    print("=" * 50)

    if args.action == "train":
        ok = train(args)
    else:
        ok = info(args)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
