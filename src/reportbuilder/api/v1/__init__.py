"""API v1 routes."""

from fastapi import APIRouter

from reportbuilder.api.v1 import exports, fields, health, preview

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(fields.router, prefix="/fields", tags=["fields"])
router.include_router(preview.router, prefix="/preview", tags=["preview"])
router.include_router(exports.router, prefix="/exports", tags=["exports"])
