"""Service information endpoint for API v1."""

from typing import Dict

from fastapi import APIRouter

from cocktail_catalog_api.app.core.config import settings

router = APIRouter()


@router.get("/health", response_model=Dict[str, str])
async def health() -> Dict[str, str]:
    """Liveness probe.  Does not contact the backend."""
    return {"status": "ok", "name": settings.project_name, "version": settings.api_version}
