"""
Health check endpoints.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from reportbuilder.api.deps import Dataset, Registry

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    app: str
    environment: str
    version: str
    fields: int
    rows: int


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, registry: Registry, dataset: Dataset) -> HealthResponse:
    """Basic health check with the size of the active table."""
    settings = request.app.state.settings
    return HealthResponse(
        status="healthy",
        app=settings.app_name,
        environment=settings.environment,
        version=settings.app_version,
        fields=len(registry),
        rows=len(dataset),
    )
