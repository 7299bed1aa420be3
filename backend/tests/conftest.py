"""Pytest configuration and fixtures for FireCert tests.

Provides an in-memory SQLite database, authenticated users for each
role, and in-memory fakes of the wizard's record gateway and document
store.
"""

import os
import tempfile
import uuid
from types import SimpleNamespace
from typing import AsyncGenerator

# Settings are read at import time, so point them at test resources first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="firecert-uploads-")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from firecert.auth.jwt import create_access_token
from firecert.auth.permissions import resolve_permissions
from firecert.database import Base, get_db
from firecert.main import app
from firecert.models import Establishment, Inspection, User, UserRole
from firecert.services.storage import LocalDocumentStore, get_document_store


# ── Database ─────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database and a temp document store."""

    async def override_get_db():
        # The session is shared with the fixtures; rolling it back on a
        # handled 4xx would expire their objects, so only commit here.
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_store] = (
        lambda: LocalDocumentStore(tmp_path, "/files")
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Users & tokens ───────────────────────────────────────────────

async def _make_user(db: AsyncSession, email: str, name: str, role: UserRole) -> User:
    user = User(email=email, full_name=name, role=role, is_active=True)
    db.add(user)
    await db.commit()
    return user


def _headers(user: User) -> dict:
    token = create_access_token(
        user_id=user.id,
        role=user.role.value,
        permissions=resolve_permissions(user.role.value, user.custom_permissions),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "owner@example.com", "Maria Santos", UserRole.OWNER)


@pytest_asyncio.fixture
async def other_owner(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "other@example.com", "Jose Reyes", UserRole.OWNER)


@pytest_asyncio.fixture
async def inspector(db_session: AsyncSession) -> User:
    return await _make_user(
        db_session, "inspector@example.com", "Ana Cruz", UserRole.INSPECTOR,
    )


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "admin@example.com", "Admin User", UserRole.ADMIN)


@pytest.fixture
def owner_headers(owner: User) -> dict:
    return _headers(owner)


@pytest.fixture
def other_headers(other_owner: User) -> dict:
    return _headers(other_owner)


@pytest.fixture
def inspector_headers(inspector: User) -> dict:
    return _headers(inspector)


@pytest.fixture
def admin_headers(admin: User) -> dict:
    return _headers(admin)


# ── Domain data ──────────────────────────────────────────────────

@pytest_asyncio.fixture
async def registered_establishment(db_session: AsyncSession, owner: User) -> Establishment:
    establishment = Establishment(
        owner_id=owner.id,
        name="Sunrise Bakery",
        dti_number="123456",
        status="registered",
        type="Commercial",
        occupancy="Mercantile",
        storeys=2,
        floor_area=180.5,
        occupants=25,
        owner_first_name="Maria",
        owner_last_name="Santos",
        owner_email="maria@example.com",
        owner_mobile="09171234567",
        street="12 Rizal Street",
        barangay="San Isidro",
        city="Quezon City",
        province="Metro Manila",
        region="NCR",
        address="12 Rizal Street, San Isidro, Quezon City, Metro Manila, NCR",
    )
    db_session.add(establishment)
    await db_session.commit()
    return establishment


@pytest_asyncio.fixture
async def unregistered_establishment(db_session: AsyncSession, owner: User) -> Establishment:
    establishment = Establishment(
        owner_id=owner.id, name="Harbor Cafe", dti_number="654321",
    )
    db_session.add(establishment)
    await db_session.commit()
    return establishment


@pytest_asyncio.fixture
async def inspection(
    db_session: AsyncSession, registered_establishment: Establishment, inspector: User,
) -> Inspection:
    record = Inspection(
        establishment_id=registered_establishment.id,
        inspector_id=inspector.id,
        establishment_name=registered_establishment.name,
        status="scheduled",
    )
    db_session.add(record)
    await db_session.commit()
    return record


@pytest.fixture
def certification_fields() -> dict:
    """A complete, valid FSEC details step."""
    return {
        "type": "FSEC",
        "contractor_name": "Juan Dela Cruz",
        "dti_number": "123456",
        "establishment_name": "Sunrise Bakery",
        "owner_first_name": "Maria",
        "owner_last_name": "Santos",
        "owner_email": "maria@example.com",
        "owner_mobile": "09171234567",
        "street": "12 Rizal Street",
        "barangay": "San Isidro",
        "city": "Quezon City",
    }


# ── Wizard fakes ─────────────────────────────────────────────────

class FakeGateway:
    """In-memory RecordGateway."""

    def __init__(self):
        self.records: dict[str, SimpleNamespace] = {}
        self.inserted: list[dict] = []
        self.updated: list[tuple[str, dict]] = []
        self.conflicts: set[str] = set()
        self.fail_with: Exception | None = None

    def add(self, **attrs) -> SimpleNamespace:
        record = SimpleNamespace(id=attrs.pop("id", str(uuid.uuid4())), **attrs)
        self.records[record.id] = record
        return record

    async def fetch_draft(self, record_id):
        record = self.records.get(record_id)
        return dict(vars(record)) if record else None

    async def find_pending_record(
        self, *, establishment_id, category, owner_id, exclude_id=None,
    ):
        for record in self.records.values():
            if (
                record.id != exclude_id
                and getattr(record, "status", None) == "pending"
                and getattr(record, "establishment_id", None) == establishment_id
                and getattr(record, "type", None) == category
                and getattr(record, "owner_id", None) == owner_id
            ):
                return record
        return None

    async def find_conflicts(self, *, name, dti_number, exclude_id=None):
        return set(self.conflicts)

    async def insert_record(self, attrs):
        if self.fail_with is not None:
            raise self.fail_with
        self.inserted.append(dict(attrs))
        return self.add(**attrs)

    async def update_record(self, record_id, attrs):
        if self.fail_with is not None:
            raise self.fail_with
        self.updated.append((record_id, dict(attrs)))
        record = self.records[record_id]
        for key, value in attrs.items():
            setattr(record, key, value)
        return record


class FakeDocumentStore:
    """In-memory DocumentStore; slugs in fail_on raise on upload."""

    def __init__(self):
        self.uploads: list[str] = []
        self.fail_on: set[str] = set()

    async def upload_document(self, slug, staged, *, prefix=None):
        if slug in self.fail_on:
            raise OSError(f"storage unavailable for {slug}")
        self.uploads.append(slug)
        return f"https://files.test/{prefix}/{slug}/{staged.filename}"


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
