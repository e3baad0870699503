import os
import tempfile

# Settings are read at import time, so the environment is prepared first
_workdir = tempfile.mkdtemp(prefix="udyam-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_workdir, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["APP_ENV"] = "test"
os.environ["APP_DEBUG"] = "false"
os.environ["UPLOAD_DIR"] = os.path.join(_workdir, "uploads")
os.environ["SCHEDULER_ENABLED"] = "false"

import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from app import models  # noqa: F401
from app.core.permissions import AdminRole
from app.core.security import create_access_token, create_admin_token
from app.database import AsyncSessionLocal, Base, engine
from app.main import app as fastapi_app
from app.models.seller import MembershipStatus, Seller, VerificationStatus
from app.services.admin_service import AdminService

ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(database):
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def seller(db):
    seller = Seller(
        phone="+919876543210",
        name="Lakshmi Devi",
        region="Rajasthan",
        city="Jaipur",
        categories=["Handicrafts"],
        document_paths=[],
        alternate_documents=[],
        verification_status=VerificationStatus.PENDING,
        union_status=MembershipStatus.ACTIVE,
    )
    db.add(seller)
    await db.commit()
    await db.refresh(seller)
    return seller


@pytest.fixture
def seller_headers(seller):
    token = create_access_token(data={"sub": str(seller.id), "phone": seller.phone})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin(db):
    admin = AdminService.build_admin("reviewer", ADMIN_PASSWORD, role=AdminRole.SUPER_ADMIN)
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    return admin


@pytest.fixture
def admin_headers(admin):
    token = create_admin_token(data={"sub": str(admin.id), "username": admin.username, "role": admin.role.value})
    return {"Authorization": f"Bearer {token}"}


def make_seller(**overrides) -> Seller:
    """Transient seller for pure transition tests; nothing is persisted."""
    fields = dict(
        id=uuid.uuid4(),
        phone="+911234567890",
        name="Test Seller",
        categories=[],
        document_paths=[],
        alternate_documents=[],
        has_documents=False,
        verification_status=VerificationStatus.PENDING,
        union_status=MembershipStatus.ACTIVE,
    )
    fields.update(overrides)
    return Seller(**fields)
