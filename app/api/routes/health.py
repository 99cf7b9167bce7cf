from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.routes.extensions import get_extension_service
from app.services.extension_service import ExtensionService

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(service: ExtensionService = Depends(get_extension_service)) -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service health.
    Exempt from rate limiting.

    Returns:
        dict: "status" set to "ok" and the number of catalog records loaded.
    """

    return {"status": "ok", "extensions": len(service)}
