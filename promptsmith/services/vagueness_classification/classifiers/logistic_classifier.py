"""
Logistic regression trained with full-batch gradient descent.
"""

import logging
from typing import Dict, List

import numpy as np

from ..models import MODEL_FORMAT_VERSION, TrainingConfig

logger = logging.getLogger(__name__)

LOGIT_CLIP = 500.0
PROBABILITY_EPSILON = 1e-15


def sigmoid(z):
    return 1.0 / (1.0 + np.exp(-np.clip(z, -LOGIT_CLIP, LOGIT_CLIP)))


def binary_cross_entropy(predicted: np.ndarray, actual: np.ndarray) -> float:
    p = np.clip(predicted, PROBABILITY_EPSILON, 1 - PROBABILITY_EPSILON)
    return float(np.mean(-(actual * np.log(p) + (1 - actual) * np.log(1 - p))))


class LogisticRegressionClassifier:
    """
    Predicts the probability that a prompt is vague.

    Weights start at zero so training is deterministic. Targets may be
    soft (any value in [0, 1]).
    """

    def __init__(self):
        self.weights = np.zeros(0, dtype=np.float64)
        self.bias = 0.0

    @property
    def feature_count(self) -> int:
        return int(self.weights.shape[0])

    @property
    def is_trained(self) -> bool:
        return self.feature_count > 0

    def train(self, features: np.ndarray, targets: np.ndarray, config: TrainingConfig) -> List[float]:
        """
        Fit weights and bias.

        Args:
            features: Matrix of shape (samples, features)
            targets: Vector of targets in [0, 1]
            config: Learning rate, epoch count and L2 strength

        Returns:
            List[float]: Regularized loss after each epoch
        """
        if features.shape[0] == 0:
            raise ValueError("Cannot train on empty feature set")
        if features.shape[0] != targets.shape[0]:
            raise ValueError(
                f"Feature count ({features.shape[0]}) must match label count ({targets.shape[0]})"
            )

        samples, width = features.shape
        weights = np.zeros(width, dtype=np.float64)
        bias = 0.0
        losses = []

        for _ in range(config.epochs):
            predicted = sigmoid(features @ weights + bias)
            loss = binary_cross_entropy(predicted, targets)

            error = predicted - targets
            weight_gradient = features.T @ error / samples + config.regularization * weights
            bias_gradient = float(np.mean(error))

            weights = weights - config.learning_rate * weight_gradient
            bias = bias - config.learning_rate * bias_gradient

            if config.regularization > 0:
                loss += (config.regularization / 2) * float(weights @ weights)
            losses.append(loss)

        self.weights = weights
        self.bias = bias
        logger.debug(f"Classifier trained on {samples} samples, final loss {losses[-1]:.4f}")
        return losses

    def predict(self, features: np.ndarray) -> float:
        """Probability of vagueness; 0.5 when untrained"""
        if not self.is_trained:
            return 0.5
        return float(sigmoid(float(features @ self.weights) + self.bias))

    def predict_score(self, features: np.ndarray) -> int:
        return int(round(self.predict(features) * 100))

    def confidence(self, features: np.ndarray) -> float:
        """Distance of the prediction from 0.5, scaled to [0, 1]"""
        return abs(self.predict(features) - 0.5) * 2

    def to_dict(self) -> Dict:
        return {
            "version": MODEL_FORMAT_VERSION,
            "weights": self.weights.tolist(),
            "bias": float(self.bias),
            "feature_count": self.feature_count
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "LogisticRegressionClassifier":
        classifier = cls()
        classifier.weights = np.asarray(data["weights"], dtype=np.float64)
        classifier.bias = float(data["bias"])
        return classifier
