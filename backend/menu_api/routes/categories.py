"""
Menu API Backend: Menu Category Route Handlers
===============================================
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.database import get_db_session
from menu_api.routes.payload import read_payload
from menu_api.schemas.category import CategoryRecord
from menu_api.schemas.common import ErrorResponse, ValidationErrorResponse
from menu_api.schemas.menu import CategoryResponse
from menu_api.services.category_service import category_service

router = APIRouter(prefix="/api/categorias", tags=["Categorías"])

_NOT_FOUND = {404: {"description": "Category not found", "model": ErrorResponse}}
_INVALID = {422: {"description": "Validation errors", "model": ValidationErrorResponse}}


@router.get("", response_model=List[CategoryResponse], summary="List all menu categories")
async def list_categories(db: AsyncSession = Depends(get_db_session)) -> List[CategoryResponse]:
    return await category_service.list_categories(db)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CategoryRecord,
    responses={**_INVALID},
    summary="Create a menu category",
)
async def create_category(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryRecord:
    payload = await read_payload(request)
    return await category_service.create_category(db, payload)


@router.get(
    "/restaurante/{restaurante_id}",
    response_model=List[CategoryResponse],
    summary="List the menu categories of a restaurant",
)
async def list_categories_by_restaurant(
    restaurante_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[CategoryResponse]:
    return await category_service.list_by_restaurant(db, restaurante_id)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={**_NOT_FOUND},
    summary="Get a menu category",
)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    return await category_service.get_category(db, category_id)


@router.put(
    "/{category_id}",
    response_model=CategoryRecord,
    responses={**_NOT_FOUND, **_INVALID},
    summary="Update a menu category",
)
async def update_category(
    category_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryRecord:
    payload = await read_payload(request)
    return await category_service.update_category(db, category_id, payload)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        **_NOT_FOUND,
        409: {"description": "Category still has products", "model": ErrorResponse},
    },
    summary="Delete a menu category",
)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await category_service.delete_category(db, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
