"""Test fixtures: a fresh in-memory SQLite database per test.

1. Environment is set before bizdir is imported: settings are read once
   at import time and BIZDIR_JWT_SECRET has no default.
2. Each test gets its own aiosqlite engine on a StaticPool (one shared
   connection, so the in-memory schema survives across sessions) with
   all tables created from the models.
3. The `client` fixture overrides get_db so every request in the test
   shares the test session. Auth is NOT overridden: tests log in or
   mint real tokens and go through the real auth pipeline.
"""

import os

os.environ.setdefault("BIZDIR_JWT_SECRET", "test-secret-key-for-the-suite-0123456789")
os.environ.setdefault("BIZDIR_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BIZDIR_BCRYPT_ROUNDS", "4")
os.environ.setdefault("BIZDIR_ENVIRONMENT", "development")

import uuid  # noqa: E402
from typing import Optional  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from bizdir.auth.jwt import PrincipalKind, issue_token  # noqa: E402
from bizdir.auth.password import hash_password  # noqa: E402
from bizdir.db.engine import get_db  # noqa: E402
from bizdir.db.models import AdminShop, AdminUser, Agent, AgentShop, Base, Operator  # noqa: E402
from bizdir.main import app  # noqa: E402

PASSWORD = "secret123"


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(engine):
    session = AsyncSession(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client bound to the test session, real auth."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Seed helpers ───────────────────────────────────────


def _suffix() -> str:
    return uuid.uuid4().hex[:8]


def _phone() -> str:
    return "+91" + str(uuid.uuid4().int)[:10].rjust(10, "7")


async def make_admin_user(db: AsyncSession, role: str = "admin", email: Optional[str] = None) -> AdminUser:
    user = AdminUser(
        name=f"{role.title()} {_suffix()}",
        email=email or f"{role}-{_suffix()}@example.com",
        password_hash=hash_password(PASSWORD),
        role=role,
    )
    db.add(user)
    await db.commit()
    return user


async def make_agent(db: AsyncSession, code: Optional[str] = None) -> Agent:
    agent = Agent(
        name="Rahul Kumar",
        phone=_phone(),
        email=f"agent-{_suffix()}@example.com",
        password_hash=hash_password(PASSWORD),
        agent_code=code or f"AG{_suffix().upper()}",
    )
    db.add(agent)
    await db.commit()
    return agent


async def make_operator(db: AsyncSession, is_active: bool = True) -> Operator:
    operator = Operator(
        name="Priya Singh",
        phone=_phone(),
        email=f"operator-{_suffix()}@example.com",
        password_hash=hash_password(PASSWORD),
        operator_code=f"OP{_suffix().upper()}",
        is_active=is_active,
    )
    db.add(operator)
    await db.commit()
    return operator


async def make_shop(
    db: AsyncSession,
    agent: Agent,
    amount: int = 100,
    payment_status: str = "PENDING",
    **fields,
) -> AgentShop:
    shop = AgentShop(
        agent_id=agent.id,
        shop_name=f"Shop {_suffix()}",
        owner_name="Owner",
        mobile="9876543210",
        category="Grocery",
        pincode="800001",
        area="Boring Road",
        address="12 Main Street, Patna",
        shop_url=f"shop-{_suffix()}",
        latitude=25.6,
        longitude=85.1,
        amount=amount,
        payment_status=payment_status,
        **fields,
    )
    db.add(shop)
    await db.commit()
    return shop


async def make_admin_shop(db: AsyncSession, **fields) -> AdminShop:
    shop = AdminShop(
        shop_name=f"Listing {_suffix()}",
        owner_name="Owner",
        mobile="9876500000",
        category="Medical",
        address="Station Road, Patna",
        pincode="800001",
        **fields,
    )
    db.add(shop)
    await db.commit()
    return shop


def auth_headers(principal, kind: PrincipalKind) -> dict[str, str]:
    if kind is PrincipalKind.ADMIN_USER:
        code = principal.role
    elif kind is PrincipalKind.AGENT:
        code = principal.agent_code
    else:
        code = principal.operator_code
    token = issue_token(kind, str(principal.id), code, principal.email)
    return {"Authorization": f"Bearer {token}"}


def admin_headers(user: AdminUser) -> dict[str, str]:
    return auth_headers(user, PrincipalKind.ADMIN_USER)


def agent_headers(agent: Agent) -> dict[str, str]:
    return auth_headers(agent, PrincipalKind.AGENT)


def operator_headers(operator: Operator) -> dict[str, str]:
    return auth_headers(operator, PrincipalKind.OPERATOR)
