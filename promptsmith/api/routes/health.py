from fastapi import APIRouter
from promptsmith.models.api import HealthCheck
from promptsmith.api.routes.enhancement import get_enhancement_service
import time

router = APIRouter()

# Store start time for uptime calculation
start_time = time.time()


@router.get("/", response_model=HealthCheck)
async def health_check():
    """Health check endpoint"""
    service = get_enhancement_service()
    providers = service.factory.create_providers()
    available = sum(1 for provider in providers if provider.is_available())

    return HealthCheck(
        status="healthy" if available else "degraded",
        uptime=time.time() - start_time,
        model_trained=service.vagueness.is_ml_ready(),
        providers_available=available,
        version="1.0.0"
    )
