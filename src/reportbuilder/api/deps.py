"""
FastAPI dependency injection functions.

The registry, dataset and export service live on ``app.state`` and are
handed to endpoints through these dependencies.
"""

from typing import Annotated, Any

from fastapi import Depends, Request

from reportbuilder.services.export_service import ExportService
from reportbuilder.services.field_registry import FieldRegistry


def get_registry(request: Request) -> FieldRegistry:
    """Get the application's field registry."""
    return request.app.state.registry


def get_dataset(request: Request) -> list[dict[str, Any]]:
    """Get the raw rows of the application's dataset."""
    return request.app.state.dataset


def get_export_service(request: Request) -> ExportService:
    """Get the application's export service."""
    return request.app.state.export_service


# Type aliases for dependency injection
Registry = Annotated[FieldRegistry, Depends(get_registry)]
Dataset = Annotated[list[dict[str, Any]], Depends(get_dataset)]
Exporter = Annotated[ExportService, Depends(get_export_service)]
