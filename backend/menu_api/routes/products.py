"""
Menu API Backend: Product Route Handlers
=========================================

What:  /api/productos CRUD plus the by-restaurant and by-category listings.
How:   Write endpoints accept multipart/form-data (the only way to send
       `imagen`), urlencoded forms or a JSON object. Handlers hand the raw
       mapping to ProductService.
Who:   Called by the restaurant admin frontend.

Response shapes:
    POST    → 201 {"success": true, "message": ..., "data": product}
    GET/PUT → bare product (or array), with restaurante and categoria
    DELETE  → 204, empty body
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.database import get_db_session
from menu_api.routes.payload import read_payload
from menu_api.schemas.common import ErrorResponse, ValidationErrorResponse
from menu_api.schemas.menu import ProductCreatedResponse, ProductResponse
from menu_api.services.product_service import product_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/productos", tags=["Productos"])

_NOT_FOUND = {404: {"description": "Product not found", "model": ErrorResponse}}
_INVALID = {422: {"description": "Validation errors", "model": ValidationErrorResponse}}
_SERVER = {500: {"description": "Server error", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[ProductResponse],
    responses={**_SERVER},
    summary="List all products",
)
async def list_products(db: AsyncSession = Depends(get_db_session)) -> List[ProductResponse]:
    return await product_service.list_products(db)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductCreatedResponse,
    responses={**_INVALID, **_SERVER},
    summary="Create a product",
    description=(
        "Fields: restaurante_id, categoria_id, nombre, descripcion, precio, "
        "disponible and an optional `imagen` file (jpeg, png, jpg, gif; max 2 MB). "
        "Send multipart/form-data to include the image."
    ),
)
async def create_product(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> ProductCreatedResponse:
    payload = await read_payload(request)
    product = await product_service.create_product(db, payload)
    return ProductCreatedResponse(data=product)


@router.get(
    "/restaurante/{restaurante_id}",
    response_model=List[ProductResponse],
    responses={**_SERVER},
    summary="List the products of a restaurant",
)
async def list_products_by_restaurant(
    restaurante_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    return await product_service.list_by_restaurant(db, restaurante_id)


@router.get(
    "/categoria/{categoria_id}",
    response_model=List[ProductResponse],
    responses={**_SERVER},
    summary="List the products of a menu category",
)
async def list_products_by_category(
    categoria_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    return await product_service.list_by_category(db, categoria_id)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**_NOT_FOUND, **_SERVER},
    summary="Get a single product",
)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.get_product(db, product_id)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**_NOT_FOUND, **_INVALID, **_SERVER},
    summary="Update a product",
    description=(
        "Only the supplied fields are changed. A new `imagen` replaces the "
        "stored one and the previous file is deleted."
    ),
)
async def update_product(
    product_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    payload = await read_payload(request)
    return await product_service.update_product(db, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_NOT_FOUND, **_SERVER},
    summary="Delete a product and its image",
)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await product_service.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
