from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from app.schemas.extension import Extension, ExtensionListResponse
from app.services.extension_service import ExtensionService

router = APIRouter(tags=["Extensions"])

CATALOG_CACHE_CONTROL = "public, max-age=300"


def get_extension_service(request: Request) -> ExtensionService:
    """FastAPI dependency returning the catalog built by the app factory."""
    return request.app.state.extension_service


@router.get("/extensions", response_model=ExtensionListResponse)
def list_extensions(
    response: Response,
    service: ExtensionService = Depends(get_extension_service),
) -> ExtensionListResponse:
    """List every extension in the catalog.

    The catalog only changes on restart, so clients may cache it for five
    minutes.
    """
    response.headers["Cache-Control"] = CATALOG_CACHE_CONTROL
    extensions = service.list_all()
    return ExtensionListResponse(count=len(extensions), extensions=extensions)


# Declared before /extensions/{extension_id} so "search" is never read as an id.
@router.get("/extensions/search/{query}", response_model=ExtensionListResponse)
def search_extensions(
    query: str,
    service: ExtensionService = Depends(get_extension_service),
) -> ExtensionListResponse:
    """Case-insensitive substring search on extension names."""
    results = service.search(query)
    return ExtensionListResponse(count=len(results), extensions=results)


@router.get(
    "/extensions/{extension_id}",
    response_model=Extension,
    responses={404: {"description": "Extension not found"}},
)
def get_extension(
    extension_id: str,
    service: ExtensionService = Depends(get_extension_service),
) -> Extension:
    """Return a single extension by id.

    Raises:
        NotFoundAppError: Rendered as 404 {"error": "extension_not_found"}.
    """
    return service.get(extension_id)
