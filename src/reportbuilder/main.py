"""
Report Builder FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reportbuilder.api.v1 import router as v1_router
from reportbuilder.core.config import Settings, settings as default_settings
from reportbuilder.core.exceptions import ReportBuilderException
from reportbuilder.core.logging import get_logger, setup_logging
from reportbuilder.services.export_service import ExportService
from reportbuilder.services.field_registry import FieldRegistry
from reportbuilder.services.field_store import FieldStore, JsonFileFieldStore
from reportbuilder.services.orders import ORDER_FIELDS, generate_orders

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    store: FieldStore | None = None,
    dataset: list[dict[str, Any]] | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to the environment)
        store: User field store (defaults to the configured JSON file)
        dataset: Raw rows (defaults to a generated demo orders dataset)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or default_settings

    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )

    app = FastAPI(
        title=settings.app_name,
        description="Add raw and calculated fields to a dataset, preview and export it",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is None and settings.field_store_path is not None:
        store = JsonFileFieldStore(settings.field_store_path, settings.field_store_key)
    if dataset is None:
        dataset = generate_orders(settings.demo_row_count, seed=settings.demo_seed)

    app.state.settings = settings
    app.state.registry = FieldRegistry(ORDER_FIELDS, store=store)
    app.state.dataset = dataset
    app.state.export_service = ExportService(
        basename=settings.export_basename,
        sheet_title=settings.export_sheet_title,
        pdf_title=settings.export_pdf_title,
        pdf_font_size=settings.export_pdf_font_size,
    )
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version} "
        f"with {len(app.state.registry)} fields and {len(dataset)} rows"
    )

    register_exception_handlers(app, settings)

    app.include_router(v1_router, prefix=settings.api_v1_prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint - basic app info."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs" if settings.debug else None,
        }

    return app


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(ReportBuilderException)
    async def report_builder_exception_handler(
        request: Request,
        exc: ReportBuilderException,
    ) -> JSONResponse:
        """Handle Report Builder exceptions."""
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            errors.append(
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
            )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": {"errors": errors},
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")

        # In production, don't expose internal error details
        if settings.is_production:
            message = "An unexpected error occurred"
        else:
            message = str(exc)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": message,
                }
            },
        )


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
