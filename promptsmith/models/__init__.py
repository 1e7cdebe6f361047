from .api import (
    ActiveDocumentPayload,
    AnalyzeRequest,
    DiagnosticPayload,
    HealthCheck,
    HealthResponse,
    ModelImportRequest,
    ModelInfo,
    ProcessRequest,
    ThresholdRequest,
    ThresholdResponse,
    TrainRequest,
    TrainResponse
)

__all__ = [
    "ActiveDocumentPayload", "AnalyzeRequest", "DiagnosticPayload", "HealthCheck",
    "HealthResponse", "ModelImportRequest", "ModelInfo", "ProcessRequest",
    "ThresholdRequest", "ThresholdResponse", "TrainRequest", "TrainResponse"
]
