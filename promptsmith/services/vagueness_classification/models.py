"""
Data models for the trainable vagueness classifier.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field, model_validator

MODEL_FORMAT_VERSION = "1.0.0"


class ScoringMode(Enum):
    """Which signal produced a vagueness score"""
    RULES = "rules"      # Model not trained
    ML = "ml"            # Model confident enough to stand alone
    HYBRID = "hybrid"    # Model blended with rule-based score


@dataclass(frozen=True)
class LabeledPrompt:
    """Training example with a numeric vagueness label"""
    prompt: str
    vagueness_score: int
    intent: str = "unknown"
    missing_elements: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "vagueness_score": self.vagueness_score,
            "intent": self.intent,
            "missing_elements": list(self.missing_elements)
        }


@dataclass(frozen=True)
class TrainingResult:
    """Outcome of VaguenessService.train_model"""
    success: bool
    samples_used: Optional[int] = None
    final_loss: Optional[float] = None
    vocabulary_size: Optional[int] = None
    error: Optional[str] = None
    trained_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            "success": self.success,
            "samples_used": self.samples_used,
            "final_loss": self.final_loss,
            "vocabulary_size": self.vocabulary_size,
            "error": self.error,
            "trained_at": self.trained_at.isoformat() if self.trained_at else None
        }


@dataclass(frozen=True)
class TrainingConfig:
    learning_rate: float = 0.5
    epochs: int = 100
    regularization: float = 0.01


# Persisted model blob

class VectorizerBlob(BaseModel):
    version: str = MODEL_FORMAT_VERSION
    vocabulary: List[str]
    idf_values: Dict[str, float]

    @model_validator(mode="after")
    def check_idf_coverage(self):
        missing = [term for term in self.vocabulary if term not in self.idf_values]
        if missing:
            raise ValueError(f"idf_values missing {len(missing)} vocabulary term(s)")
        if len(set(self.vocabulary)) != len(self.vocabulary):
            raise ValueError("vocabulary contains duplicate terms")
        return self


class ClassifierBlob(BaseModel):
    version: str = MODEL_FORMAT_VERSION
    weights: List[float]
    bias: float
    feature_count: int = Field(ge=0)

    @model_validator(mode="after")
    def check_weight_count(self):
        if len(self.weights) != self.feature_count:
            raise ValueError(
                f"expected {self.feature_count} weights, got {len(self.weights)}"
            )
        return self


class TrainedModelBlob(BaseModel):
    """JSON shape of an exported vagueness model"""
    version: str = MODEL_FORMAT_VERSION
    vectorizer: VectorizerBlob
    classifier: ClassifierBlob
    trained_at: datetime

    @model_validator(mode="after")
    def check_dimensions(self):
        if len(self.vectorizer.vocabulary) != self.classifier.feature_count:
            raise ValueError("classifier feature_count does not match vocabulary size")
        return self
