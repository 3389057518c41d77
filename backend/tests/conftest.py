"""
Menu API Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the whole test suite.
How:   Every test gets a fresh in-memory SQLite database (tables created
       from Base.metadata) and its own storage directory.

Fixture Hierarchy:
    ├── db_engine:        async engine on sqlite+aiosqlite://, tables created
    ├── db_session:       AsyncSession bound to db_engine
    ├── temp_storage:     temporary storage root
    ├── blob_store:       FileService writing into temp_storage
    ├── sample_*_bytes:   minimal JPEG / PNG / GIF images
    ├── restaurant / category:  seeded rows
    └── test_client:      HTTPX AsyncClient against the app, sharing db_engine
"""

import os
import tempfile

# Settings are read at import time: point them at throwaway resources first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="menu_api_test_")
os.environ["PUBLIC_URL"] = "http://testserver"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from menu_api.database import Base, get_db_session
from menu_api.models import Category, Restaurant
from menu_api.services.file_service import FileService


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory database shared by every connection of the test.

    StaticPool keeps one connection alive, otherwise each new connection
    would see an empty :memory: database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Storage
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def blob_store(temp_storage):
    return FileService(storage_root=temp_storage, public_url="http://testserver")


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """1x1 transparent PNG."""
    return (
        b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01'
        b'\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f'
        b'\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82'
    )


@pytest.fixture
def sample_gif_bytes():
    """1x1 GIF89a."""
    return (
        b'GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04'
        b'\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D'
        b'\x01\x00;'
    )


# ══════════════════════════════════════════════════════════════════════════
# Seed Data
# ══════════════════════════════════════════════════════════════════════════

async def add_restaurant(session: AsyncSession, **overrides) -> Restaurant:
    values = {
        "usuario_admin_id": 1,
        "nombre": "La Terraza",
        "direccion": "Av. Siempre Viva 742",
        "telefono": "555-0101",
        "estado": "Abierto",
    }
    values.update(overrides)
    restaurant = Restaurant(**values)
    session.add(restaurant)
    await session.commit()
    await session.refresh(restaurant)
    return restaurant


async def add_category(session: AsyncSession, restaurante_id: int, **overrides) -> Category:
    values = {"restaurante_id": restaurante_id, "nombre": "Entradas", "descripcion": None}
    values.update(overrides)
    category = Category(**values)
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return category


@pytest_asyncio.fixture
async def restaurant(db_session):
    return await add_restaurant(db_session)


@pytest_asyncio.fixture
async def category(db_session, restaurant):
    return await add_category(db_session, restaurant.id)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, blob_store, monkeypatch):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Requests use the test database and the test storage directory.
    """
    from menu_api.main import app
    from menu_api.routes import files
    from menu_api.services.product_service import product_service
    from menu_api.services.restaurant_service import restaurant_service

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    monkeypatch.setattr(product_service, "blob_store", blob_store)
    monkeypatch.setattr(restaurant_service, "blob_store", blob_store)
    monkeypatch.setattr(files, "file_service", blob_store)
    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
