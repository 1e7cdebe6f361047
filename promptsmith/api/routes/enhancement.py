"""
API routes for prompt enhancement functionality.
Provides endpoints for prompt enhancement, vagueness analysis and model management.
"""

import logging
from typing import Optional, Dict, Any
from fastapi import APIRouter, HTTPException

from promptsmith.config import settings
from promptsmith.models.api import (
    AnalyzeRequest,
    HealthResponse,
    ModelImportRequest,
    ModelInfo,
    ProcessRequest,
    ThresholdRequest,
    ThresholdResponse,
    TrainRequest,
    TrainResponse
)
from promptsmith.services.prompt_enhancement.errors import ModelImportError
from promptsmith.services.prompt_enhancement.factory import EnhancementService

logger = logging.getLogger(__name__)

# Initialize enhancement service (singleton pattern)
_enhancement_service: Optional[EnhancementService] = None


def get_enhancement_service() -> EnhancementService:
    """
    Get or create enhancement service instance.

    Returns:
        EnhancementService: Configured enhancement service
    """
    global _enhancement_service

    if _enhancement_service is None:
        try:
            _enhancement_service = EnhancementService(settings)
        except Exception as e:
            logger.error(f"Failed to initialize enhancement service: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Enhancement service unavailable")

    return _enhancement_service


def dispose_enhancement_service():
    """Release the shared service; the next request builds a fresh one"""
    global _enhancement_service

    if _enhancement_service is not None:
        _enhancement_service.dispose()
        _enhancement_service = None


# Create router
router = APIRouter(prefix="/api/enhancement", tags=["Enhancement"])


@router.post("/process")
async def process_prompt(request: ProcessRequest) -> Dict[str, Any]:
    """
    Enhance a prompt.

    Prompts scoring below the vagueness threshold come back as skipped.
    Rate limiting, provider failures and timeouts are reported in the
    result body with an error category rather than as HTTP errors.
    """
    enhancement_service = get_enhancement_service()

    active_document = request.active_document.to_document() if request.active_document else None
    diagnostics = [d.to_diagnostic() for d in request.diagnostics]

    return await enhancement_service.process_prompt(
        request.prompt,
        active_document=active_document,
        diagnostics=diagnostics
    )


@router.post("/analyze")
async def analyze_prompt(request: AnalyzeRequest) -> Dict[str, Any]:
    """Score a prompt's vagueness without enhancing it"""
    return get_enhancement_service().analyze(request.prompt)


@router.put("/threshold", response_model=ThresholdResponse)
async def set_threshold(request: ThresholdRequest):
    try:
        threshold = get_enhancement_service().set_threshold(request.threshold)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ThresholdResponse(threshold=threshold)


@router.post("/model/train", response_model=TrainResponse)
async def train_model(request: Optional[TrainRequest] = None):
    """
    Train the vagueness model.

    Uses the bundled seed prompts unless examples are supplied. A failed
    training run leaves the active model untouched.
    """
    request = request or TrainRequest()
    examples = None
    if request.examples is not None:
        examples = [example.to_labeled_prompt() for example in request.examples]

    result = get_enhancement_service().train_model(examples, persist=request.persist)
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result["error"])

    return TrainResponse(**result)


@router.get("/model")
async def export_model() -> Dict[str, Any]:
    """Export the trained model blob"""
    blob = get_enhancement_service().get_model()
    if blob is None:
        raise HTTPException(status_code=404, detail="No trained vagueness model")
    return blob


@router.put("/model", response_model=ModelInfo)
async def import_model(request: ModelImportRequest):
    try:
        info = get_enhancement_service().import_model(request.model, persist=request.persist)
    except ModelImportError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ModelInfo(**info)


@router.delete("/model", response_model=ModelInfo)
async def reset_model():
    """Discard the trained model and fall back to rule-based scoring"""
    return ModelInfo(**get_enhancement_service().reset_model())


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Check health of enhancement system components.

    Returns health status of rewrite providers, the vagueness model,
    rate limiter, cache and metrics collection.
    """
    try:
        enhancement_service = get_enhancement_service()
        health_data = await enhancement_service.health_check()

        return HealthResponse(**health_data)

    except Exception as e:
        logger.error(f"Enhancement health check failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=503,
            detail="Health check failed"
        )


@router.get("/metrics")
async def get_metrics():
    """Get enhancement system performance metrics"""
    return await get_enhancement_service().get_metrics()
