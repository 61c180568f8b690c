"""
Shared fixtures: in-memory SQLite in place of PostgreSQL, a dict-backed
snapshot store in place of MongoDB, and an HTTP client with auth overridden.
"""
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("AI_PROVIDER", "none")

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.pool import StaticPool

from app.database.postgresql import Base, get_db
from app.auth.models import User, UserRole  # noqa: F401
from app.audit.models import AuditEvent  # noqa: F401
from app.document.models import Document
from app.versioning.models import DocumentVersion  # noqa: F401
from app.segmentation.models import VersionSegment  # noqa: F401
from app.translation.models import SegmentTranslation  # noqa: F401
from app.workflow.models import Approval  # noqa: F401


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    with patch("app.audit.service.AsyncSessionLocal", factory):
        yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def snapshot_store():
    """Fake `version_snapshots` collection keyed by ObjectId."""
    docs = {}

    async def insert_one(doc):
        oid = ObjectId()
        docs[oid] = dict(doc, _id=oid)
        return MagicMock(inserted_id=oid)

    async def find_one(query):
        return docs.get(query["_id"])

    collection = MagicMock()
    collection.insert_one = AsyncMock(side_effect=insert_one)
    collection.find_one = AsyncMock(side_effect=find_one)
    collection.docs = docs
    with patch("app.versioning.service.version_snapshots_collection", return_value=collection):
        yield collection


@pytest_asyncio.fixture
async def make_document(db):
    async def _make(title="Power of Attorney", target_langs=("en", "si"), case_id="case-1"):
        document = Document(
            title=title,
            case_id=case_id,
            source_lang="ko",
            target_langs=list(target_langs),
            created_by=uuid.uuid4(),
        )
        db.add(document)
        await db.flush()
        return document
    return _make


@pytest_asyncio.fixture
async def make_version(db, snapshot_store):
    from app.versioning.service import create_document_version

    async def _make(document, content="제1조 위임\n\n제2조 범위"):
        return await create_document_version(db, document.id, content, created_by=document.created_by)
    return _make


@pytest.fixture
def current_user():
    """Mutable caller identity; tests set `role` before making requests."""
    return {"user_id": uuid.uuid4(), "role": UserRole.ADMIN.value}


def _bind_db(app, db):
    async def _override_db():
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = _override_db


@pytest_asyncio.fixture
async def client(db, current_user, snapshot_store):
    from app.main import app
    from app.middleware.auth_middleware import get_current_user

    _bind_db(app, db)
    app.dependency_overrides[get_current_user] = lambda: current_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def token_client(db, snapshot_store):
    """Client that authenticates with real bearer tokens."""
    from app.main import app

    _bind_db(app, db)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
