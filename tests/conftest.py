import os

# Configuração mínima antes de importar todo_auth.core.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./unused-test.db"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789-abcdefghijklmnopqrstuvwxyz"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import timedelta

import httpx
import pytest
import pytest_asyncio

from todo_auth.core.config import settings
from todo_auth.core.security import TokenCodec
from todo_auth.db.initial_data import init_db
from todo_auth.db.session import build_engine, build_session_factory, get_db
from todo_auth.schemas.user import UserCreate
from todo_auth.services.identity import SqlIdentityStore
from todo_auth.services.token_service import TokenService

ACCESS_TTL = timedelta(seconds=600)
EXPIRED_TTL = timedelta(seconds=-60)
REFRESH_TTL = timedelta(days=180)
PASSWORD = "Sup3rSecret!"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def codec():
    return TokenCodec(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
    )


@pytest.fixture
def make_service(codec):
    def _make(session, access_ttl=ACCESS_TTL, refresh_ttl=REFRESH_TTL):
        return TokenService(
            db=session,
            codec=codec,
            users=SqlIdentityStore(session),
            access_token_ttl=access_ttl,
            refresh_token_ttl=refresh_ttl,
        )
    return _make


@pytest.fixture
def service(db, make_service):
    return make_service(db)


@pytest.fixture
def expired_service(db, make_service):
    """Emite access tokens já expirados, para exercitar a rotação."""
    return make_service(db, access_ttl=EXPIRED_TTL)


@pytest_asyncio.fixture
async def user(db):
    return await SqlIdentityStore(db).create(
        UserCreate(email="alice@example.com", username="alice", password=PASSWORD)
    )


@pytest_asyncio.fixture
async def client(session_factory):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
