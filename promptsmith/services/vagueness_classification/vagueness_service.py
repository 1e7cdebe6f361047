"""
Vagueness service: rule-based scoring blended with a trainable model.
Owns the trained model's lifecycle (train, export, import, reset, persist).
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic import ValidationError

from promptsmith.services.prompt_enhancement.analyzers.vagueness_rules import VaguenessClassifier
from promptsmith.services.prompt_enhancement.errors import ModelImportError
from promptsmith.services.prompt_enhancement.models import AnalysisResult, AnalysisSource

from .classifiers.vagueness_model import VaguenessModel
from .learning.model_store import ModelStore
from .models import (
    LabeledPrompt,
    ScoringMode,
    TrainedModelBlob,
    TrainingConfig,
    TrainingResult
)

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 30
ML_CONFIDENCE_THRESHOLD = 0.6

_SOURCES = {
    ScoringMode.RULES: AnalysisSource.RULES,
    ScoringMode.ML: AnalysisSource.ML,
    ScoringMode.HYBRID: AnalysisSource.HYBRID,
}


def _validate_threshold(threshold: int) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValueError("Threshold must be a number between 0 and 100")
    if threshold < 0 or threshold > 100:
        raise ValueError("Threshold must be between 0 and 100")
    return int(threshold)


class VaguenessService:
    """
    Unified vagueness analysis.

    Rule-based analysis always runs and supplies issues and flags. Once a
    model is trained its score replaces (confident) or is blended with
    (uncertain) the rule score.
    """

    def __init__(
        self,
        threshold: int = DEFAULT_THRESHOLD,
        rules: Optional[VaguenessClassifier] = None,
        training_config: Optional[TrainingConfig] = None
    ):
        """
        Initialize vagueness service.

        Args:
            threshold: Skip/enhance boundary, 0-100
            rules: Rule-based classifier, created when omitted
            training_config: Gradient descent settings for train_model
        """
        self._threshold = _validate_threshold(threshold)
        self.rules = rules or VaguenessClassifier(threshold=self._threshold)
        self.training_config = training_config or TrainingConfig()
        self._model: Optional[VaguenessModel] = None

    # Threshold

    def get_threshold(self) -> int:
        return self._threshold

    def set_threshold(self, threshold: int):
        """
        Set the skip/enhance boundary.

        Raises:
            ValueError: When threshold is outside [0, 100]
        """
        self._threshold = _validate_threshold(threshold)
        self.rules.threshold = self._threshold

    # Model lifecycle

    def is_ml_ready(self) -> bool:
        return self._model is not None

    def scoring_mode(self, ml_confidence: Optional[float] = None) -> ScoringMode:
        """
        Scoring mode for a prediction of the given confidence.

        A confident model scores alone (ML). A less confident one is
        blended with the rule score, weighted by its confidence (HYBRID).
        Without a trained model only the rules apply.
        """
        if self._model is None:
            return ScoringMode.RULES
        if ml_confidence is not None and ml_confidence >= ML_CONFIDENCE_THRESHOLD:
            return ScoringMode.ML
        return ScoringMode.HYBRID

    def train_model(self, examples: Sequence[LabeledPrompt]) -> TrainingResult:
        """
        Train a fresh model; the current one is replaced only on success.

        Args:
            examples: Labelled prompts, vagueness scores 0-100

        Returns:
            TrainingResult: Success with statistics, or failure with an error message
        """
        if not examples:
            return TrainingResult(success=False, error="Cannot train on empty dataset")

        try:
            model, result = VaguenessModel.train(examples, self.training_config)
        except (ValueError, FloatingPointError) as e:
            logger.error(f"Vagueness model training failed: {e}", exc_info=True)
            return TrainingResult(success=False, error=str(e))

        self._model = model
        logger.info(
            f"Vagueness model trained: {result.samples_used} samples, "
            f"vocabulary {result.vocabulary_size}, loss {result.final_loss:.4f}"
        )
        return result

    def export_model(self) -> Optional[Dict[str, Any]]:
        """JSON-compatible blob of the trained model, or None when untrained"""
        if self._model is None:
            return None
        return self._model.to_dict()

    def import_model(self, blob: Dict[str, Any]):
        """
        Replace the current model with an exported one.

        Raises:
            ModelImportError: When the blob is malformed; the current model is kept
        """
        try:
            validated = TrainedModelBlob.model_validate(blob)
        except ValidationError as e:
            raise ModelImportError(f"Invalid model blob: {e.error_count()} validation error(s)") from e

        self._model = VaguenessModel.from_blob(validated)
        logger.info(f"Vagueness model imported (trained at {validated.trained_at.isoformat()})")

    def reset_model(self):
        self._model = None
        logger.info("Vagueness model reset, using rule-based scoring")

    def save_model(self, store: ModelStore) -> bool:
        """Persist the trained model; False when there is nothing to save"""
        blob = self.export_model()
        if blob is None:
            return False
        store.save(blob)
        return True

    def load_model(self, store: ModelStore) -> bool:
        """
        Load a persisted model if one exists.

        Raises:
            ModelImportError: When the stored blob is unreadable or invalid
        """
        try:
            blob = store.load()
        except ValueError as e:
            raise ModelImportError(f"Stored model is not valid JSON: {e}") from e
        if blob is None:
            return False
        self.import_model(blob)
        return True

    # Analysis

    def analyze_vagueness(self, prompt: str) -> AnalysisResult:
        """
        Score a prompt.

        Args:
            prompt: User prompt

        Returns:
            AnalysisResult: Rule issues and flags with the score of the active scoring mode
        """
        rules_result = self.rules.analyze(prompt)

        if not prompt or not prompt.strip():
            return replace(rules_result, is_vague=True)

        if self._model is None:
            return replace(rules_result, is_vague=rules_result.score >= self._threshold)

        prediction = self._model.predict(prompt)
        mode = self.scoring_mode(prediction.confidence)

        if mode == ScoringMode.ML:
            score = prediction.score
        else:
            c = prediction.confidence
            score = int(round(c * prediction.score + (1 - c) * rules_result.score))

        logger.debug(
            f"Vagueness {mode.value}: ml={prediction.score} rules={rules_result.score} "
            f"confidence={prediction.confidence:.2f} -> {score}"
        )

        return replace(
            rules_result,
            score=score,
            source=_SOURCES[mode],
            confidence=prediction.confidence,
            is_vague=score >= self._threshold
        )

    def analyze_with_ml_only(self, prompt: str) -> Optional[Tuple[int, float]]:
        """Raw model (score, confidence) for debugging; None when untrained"""
        if self._model is None:
            return None
        prediction = self._model.predict(prompt)
        return prediction.score, prediction.confidence

    def get_model_info(self) -> Dict[str, Any]:
        if self._model is None:
            return {"trained": False, "threshold": self._threshold, "mode": ScoringMode.RULES.value}
        return {
            "trained": True,
            "threshold": self._threshold,
            "vocabulary_size": self._model.vectorizer.feature_count,
            "trained_at": self._model.trained_at.isoformat()
        }
