"""Health check endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.config import Settings, get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Return API health status.

    Used by load balancers and monitoring systems to verify
    the service is running and responsive.
    """
    return HealthResponse(status="ok", version=settings.api_version)
