"""
Menu API Backend: Stored Image Route
=====================================

What:  GET /storage/{path} serves images written by FileService.
How:   The path is resolved inside the storage root by FileService; anything
       outside it, or missing, is a 404.
Who:   Loaded by <img> tags through the product's imagen_url.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import FileResponse

from menu_api.exceptions import NotFoundError
from menu_api.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Storage"])


@router.get(
    "/storage/{file_path:path}",
    summary="Serve a stored product image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found"},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    try:
        full_path = file_service.path_for(file_path)
    except ValueError:
        logger.warning("Rejected storage path outside root: %s", file_path)
        raise NotFoundError(resource="archivo", resource_id=file_path)

    if not full_path.is_file():
        raise NotFoundError(resource="archivo", resource_id=file_path)

    # media type is guessed from the extension
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
