"""
Vagueness Classification

Rule-based vagueness scoring combined with a small trainable model
(TF-IDF features, logistic regression) that can be exported, imported
and persisted as JSON.

Usage:
    from promptsmith.services.vagueness_classification import VaguenessService

    service = VaguenessService(threshold=30)
    service.train_model(generate_seed_dataset())
    result = service.analyze_vagueness("fix it")
"""

from .learning.training_data import generate_seed_dataset
from .models import LabeledPrompt, ScoringMode, TrainedModelBlob, TrainingResult
from .vagueness_service import VaguenessService

__all__ = [
    "VaguenessService",
    "LabeledPrompt",
    "ScoringMode",
    "TrainedModelBlob",
    "TrainingResult",
    "generate_seed_dataset"
]
