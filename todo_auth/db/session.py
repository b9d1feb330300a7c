# todo_auth_api/todo_auth/db/session.py
from typing import AsyncGenerator, Optional
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)
from todo_auth.core.config import settings

# Engine e fábrica de sessões são criadas sob demanda (import não abre conexão)
_async_engine: Optional[AsyncEngine] = None
_AsyncSessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    # SQLite: cada transação pega o lock de escrita já no BEGIN, senão duas
    # sessões promovendo SHARED -> RESERVED recebem "database is locked".
    # Leituras também seguram o lock até commit/rollback: caminhos só de
    # leitura (ex: get_current_user) encerram a transação logo após a consulta.
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(db_url: str) -> AsyncEngine:
    # A URL precisa de um driver async: "postgresql+asyncpg://...", "sqlite+aiosqlite:///..."
    engine = create_async_engine(db_url, pool_pre_ping=True, echo=False)
    if engine.dialect.name == "sqlite":
        _use_immediate_transactions(engine)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_async_engine() -> AsyncEngine:
    """Creates the engine if it doesn't exist yet."""
    global _async_engine
    if _async_engine is None:
        if not settings.DATABASE_URL:
            raise RuntimeError("DATABASE_URL not loaded from settings. Check .env file and config.py")
        _async_engine = build_engine(settings.DATABASE_URL)
    return _async_engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    global _AsyncSessionLocal
    if _AsyncSessionLocal is None:
        _AsyncSessionLocal = build_session_factory(get_async_engine())
    return _AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    SessionLocal = get_session_local()
    async with SessionLocal() as db:
        yield db


async def dispose_engine() -> None:
    global _async_engine, _AsyncSessionLocal
    if _async_engine:
        await _async_engine.dispose()
        _async_engine = None
        _AsyncSessionLocal = None
