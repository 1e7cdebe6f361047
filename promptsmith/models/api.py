from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone

from promptsmith.services.prompt_enhancement.context.models import (
    ActiveDocument,
    Diagnostic,
    DiagnosticSeverity
)
from promptsmith.services.vagueness_classification.models import LabeledPrompt


class ActiveDocumentPayload(BaseModel):
    path: str = Field(..., description="Absolute or workspace-relative path of the open file")
    language_id: str = Field(..., description="Editor language id, e.g. typescript or python")
    selection: str = ""

    def to_document(self) -> ActiveDocument:
        return ActiveDocument(path=self.path, language_id=self.language_id, selection=self.selection)


class DiagnosticPayload(BaseModel):
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    message: str
    line: Optional[int] = Field(None, ge=0)

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(severity=self.severity, message=self.message, line=self.line)


class ProcessRequest(BaseModel):
    prompt: str = Field(..., description="Prompt to enhance")
    active_document: Optional[ActiveDocumentPayload] = None
    diagnostics: List[DiagnosticPayload] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "prompt": "fix the bug",
                "active_document": {
                    "path": "src/auth/login.ts",
                    "language_id": "typescript",
                    "selection": ""
                },
                "diagnostics": [
                    {"severity": "error", "message": "Cannot find name 'user'", "line": 12}
                ]
            }
        }
    }


class AnalyzeRequest(BaseModel):
    prompt: str = Field(..., description="Prompt to score")


class ThresholdRequest(BaseModel):
    threshold: int = Field(..., ge=0, le=100, description="Prompts scoring below this skip enhancement")


class ThresholdResponse(BaseModel):
    threshold: int


class LabeledPromptPayload(BaseModel):
    prompt: str = Field(..., min_length=1)
    vagueness_score: int = Field(..., ge=0, le=100)
    intent: str = "unknown"
    missing_elements: List[str] = Field(default_factory=list)

    def to_labeled_prompt(self) -> LabeledPrompt:
        return LabeledPrompt(
            prompt=self.prompt,
            vagueness_score=self.vagueness_score,
            intent=self.intent,
            missing_elements=list(self.missing_elements)
        )


class TrainRequest(BaseModel):
    # Bundled seed prompts are used when omitted
    examples: Optional[List[LabeledPromptPayload]] = None
    persist: bool = True


class TrainResponse(BaseModel):
    success: bool
    samples_used: Optional[int] = None
    final_loss: Optional[float] = None
    vocabulary_size: Optional[int] = None
    error: Optional[str] = None
    trained_at: Optional[str] = None


class ModelImportRequest(BaseModel):
    model: Dict[str, Any] = Field(..., description="Blob previously returned by GET /model")
    persist: bool = True


class ModelInfo(BaseModel):
    trained: bool
    threshold: int
    mode: Optional[str] = None
    vocabulary_size: Optional[int] = None
    trained_at: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(..., description="Overall health status")
    timestamp: float = Field(..., description="Health check timestamp")
    components: Dict[str, Any] = Field(..., description="Component health details")


class HealthCheck(BaseModel):
    model_config = {"protected_namespaces": ()}

    status: str = "healthy"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    uptime: Optional[float] = None
    model_trained: bool = False
    providers_available: int = 0
    version: str = "1.0.0"
