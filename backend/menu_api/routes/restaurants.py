"""
Menu API Backend: Restaurant Route Handlers
============================================

What:  /api/restaurantes CRUD plus GET /api/restaurantes/usuario/{id}.
How:   Reads return restaurants with their categorias and productos;
       create/update return the bare record.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.database import get_db_session
from menu_api.routes.payload import read_payload
from menu_api.schemas.common import ErrorResponse, ValidationErrorResponse
from menu_api.schemas.menu import RestaurantResponse
from menu_api.schemas.restaurant import RestaurantRecord
from menu_api.services.restaurant_service import restaurant_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/restaurantes", tags=["Restaurantes"])

_NOT_FOUND = {404: {"description": "Restaurant not found", "model": ErrorResponse}}
_INVALID = {422: {"description": "Validation errors", "model": ValidationErrorResponse}}


@router.get("", response_model=List[RestaurantResponse], summary="List all restaurants")
async def list_restaurants(db: AsyncSession = Depends(get_db_session)) -> List[RestaurantResponse]:
    return await restaurant_service.list_restaurants(db)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=RestaurantRecord,
    responses={**_INVALID},
    summary="Create a restaurant",
)
async def create_restaurant(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> RestaurantRecord:
    payload = await read_payload(request)
    return await restaurant_service.create_restaurant(db, payload)


@router.get(
    "/usuario/{usuario_admin_id}",
    response_model=List[RestaurantResponse],
    summary="List the restaurants administered by a user",
)
async def list_restaurants_by_owner(
    usuario_admin_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[RestaurantResponse]:
    return await restaurant_service.list_by_owner(db, usuario_admin_id)


@router.get(
    "/{restaurant_id}",
    response_model=RestaurantResponse,
    responses={**_NOT_FOUND},
    summary="Get a restaurant with its menu",
)
async def get_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> RestaurantResponse:
    return await restaurant_service.get_restaurant(db, restaurant_id)


@router.put(
    "/{restaurant_id}",
    response_model=RestaurantRecord,
    responses={**_NOT_FOUND, **_INVALID},
    summary="Update a restaurant",
)
async def update_restaurant(
    restaurant_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> RestaurantRecord:
    payload = await read_payload(request)
    return await restaurant_service.update_restaurant(db, restaurant_id, payload)


@router.delete(
    "/{restaurant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        **_NOT_FOUND,
        409: {"description": "Restaurant still has products or categories", "model": ErrorResponse},
    },
    summary="Delete a restaurant",
)
async def delete_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await restaurant_service.delete_restaurant(db, restaurant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
