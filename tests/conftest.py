"""Shared fixtures: a throwaway SQLite database per test and a fake Google Books client."""
import asyncio
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.exceptions import CatalogNotFoundError, LibraryValidationError
from app.database.db import Base
from app.database.db_depends import get_db
from app.main import app
from app.models import User
from app.models.enum import UserRole
from app.schemas.catalog import CatalogConfigOut, SearchResponse, Volume
from app.services.catalog_client import get_catalog_client
from app.utils.helpers import build_advanced_query


def make_volume(volume_id, title="Dune", page_count=200, authors=("Frank Herbert",), **info):
    """A Volume parsed from a Google-shaped (camelCase) payload."""
    volume_info = {
        "title": title,
        "authors": list(authors),
        "pageCount": page_count,
        "publisher": "Chilton Books",
        "publishedDate": "1965-08-01",
        "language": "en",
        "categories": ["Fiction"],
        "industryIdentifiers": [
            {"type": "ISBN_10", "identifier": "0441013597"},
            {"type": "ISBN_13", "identifier": "9780441013593"},
        ],
        "imageLinks": {"thumbnail": f"https://books.test/{volume_id}.jpg"},
    }
    volume_info.update(info)
    return Volume.model_validate({"kind": "books#volume", "id": volume_id, "volumeInfo": volume_info})


class FakeCatalogClient:
    """Stands in for GoogleBooksClient; serves volumes from a dict."""

    def __init__(self, volumes=None):
        self.volumes = {v.id: v for v in volumes or []}
        self.requested = []

    async def get_by_id(self, volume_id):
        self.requested.append(volume_id)
        if volume_id not in self.volumes:
            raise CatalogNotFoundError("Book not found")
        return self.volumes[volume_id]

    async def search(self, query, max_results=10, start_index=0, **options):
        if not query or not query.strip():
            raise LibraryValidationError("Search query must not be empty")
        self.requested.append(query)
        items = list(self.volumes.values())[start_index:start_index + max_results]
        return SearchResponse(kind="books#volumes", total_items=len(self.volumes), items=items)

    async def advanced_search(self, title=None, author=None, publisher=None, subject=None,
                              isbn=None, **options):
        query = build_advanced_query(title, author, publisher, subject, isbn)
        if not query:
            raise LibraryValidationError("At least one search parameter must be provided")
        return await self.search(query, **options)

    def get_config(self):
        return CatalogConfigOut(
            base_url="https://books.test/books/v1",
            has_api_key=False,
            timeout=1.0,
            using_free_tier=True,
        )


def _sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


async def _create_tables(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def catalog():
    return FakeCatalogClient([
        make_volume("X123", title="Dune", page_count=200),
        make_volume("Y456", title="Solaris", page_count=204, authors=("Stanislaw Lem",)),
        make_volume("Z789", title="No Pages", page_count=None, authors=()),
    ])


# ---------- service level (pytest-asyncio) ---------- #
@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(_sqlite_url(tmp_path), poolclass=NullPool)
    await _create_tables(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest_asyncio.fixture
async def make_user(session):
    counter = {"n": 0}

    async def factory(username=None, role=UserRole.USER):
        counter["n"] += 1
        username = username or f"reader{counter['n']}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        session.add(user)
        await session.commit()
        return user

    return factory


# ---------- HTTP level (TestClient) ---------- #
@pytest.fixture
def api_session_maker(tmp_path):
    engine = create_async_engine(_sqlite_url(tmp_path), poolclass=NullPool)
    asyncio.run(_create_tables(engine))
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def client(api_session_maker, catalog):
    async def override_get_db():
        async with api_session_maker() as s:
            yield s

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_client] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user through the API and return its bearer headers and token payload."""

    def factory(username="reader", password="secret123", **extra):
        response = client.post("/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            **extra,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body

    return factory


@pytest.fixture
def set_role(api_session_maker):
    def apply(user_id, role=UserRole.ADMIN, **values):
        async def run():
            async with api_session_maker() as s:
                await s.execute(update(User).where(User.id == user_id).values(role=role, **values))
                await s.commit()

        asyncio.run(run())

    return apply
