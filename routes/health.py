"""
Route handlers for service health.
"""
from fastapi import APIRouter, Depends

from config import Config
from models.api_models import HealthResponse
from routes.dependencies import get_config
from utils.metrics import utc_timestamp

router = APIRouter(prefix="/api")


@router.get("/health", response_model=HealthResponse)
async def health(config: Config = Depends(get_config)):
    """Report liveness and the configured model."""
    return HealthResponse(status="ok", timestamp=utc_timestamp(), model=config.MODEL)
