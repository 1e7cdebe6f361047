"""
Trainable vagueness model: TF-IDF features into a logistic regression.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Sequence, Tuple

import numpy as np

from ..models import (
    LabeledPrompt,
    MODEL_FORMAT_VERSION,
    TrainedModelBlob,
    TrainingConfig,
    TrainingResult
)
from .logistic_classifier import LogisticRegressionClassifier
from .tfidf_vectorizer import TfIdfVectorizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MLPrediction:
    score: int
    confidence: float
    probability: float


class VaguenessModel:
    """Fitted vectorizer and classifier, plus when they were trained"""

    def __init__(
        self,
        vectorizer: TfIdfVectorizer,
        classifier: LogisticRegressionClassifier,
        trained_at: datetime
    ):
        self.vectorizer = vectorizer
        self.classifier = classifier
        self.trained_at = trained_at

    @classmethod
    def train(
        cls,
        examples: Sequence[LabeledPrompt],
        config: TrainingConfig = TrainingConfig()
    ) -> Tuple["VaguenessModel", TrainingResult]:
        """
        Fit a new model on labelled prompts.

        Labels are vagueness scores in [0, 100], used as soft targets score / 100.

        Raises:
            ValueError: When the examples yield no usable features
        """
        prompts = [example.prompt for example in examples]
        targets = np.asarray(
            [min(max(example.vagueness_score, 0), 100) / 100 for example in examples],
            dtype=np.float64
        )

        vectorizer = TfIdfVectorizer()
        features = vectorizer.fit_transform(prompts)
        if vectorizer.feature_count == 0:
            raise ValueError("Training prompts produced an empty vocabulary")

        classifier = LogisticRegressionClassifier()
        losses = classifier.train(features, targets, config)

        trained_at = datetime.now(timezone.utc)
        model = cls(vectorizer, classifier, trained_at)
        result = TrainingResult(
            success=True,
            samples_used=len(prompts),
            final_loss=losses[-1],
            vocabulary_size=vectorizer.feature_count,
            trained_at=trained_at
        )
        return model, result

    def predict(self, prompt: str) -> MLPrediction:
        features = self.vectorizer.transform(prompt)
        probability = self.classifier.predict(features)
        return MLPrediction(
            score=int(round(probability * 100)),
            confidence=abs(probability - 0.5) * 2,
            probability=probability
        )

    def to_dict(self) -> Dict:
        return {
            "version": MODEL_FORMAT_VERSION,
            "vectorizer": self.vectorizer.to_dict(),
            "classifier": self.classifier.to_dict(),
            "trained_at": self.trained_at.isoformat()
        }

    @classmethod
    def from_blob(cls, blob: TrainedModelBlob) -> "VaguenessModel":
        return cls(
            TfIdfVectorizer.from_dict(blob.vectorizer.model_dump()),
            LogisticRegressionClassifier.from_dict(blob.classifier.model_dump()),
            blob.trained_at
        )
