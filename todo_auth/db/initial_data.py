# todo_auth_api/todo_auth/db/initial_data.py
import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

from todo_auth.db.base import Base
from todo_auth.db.session import get_async_engine, dispose_engine

# Todos os modelos precisam estar importados para que Base.metadata os conheça
from todo_auth.models import user  # noqa F401
from todo_auth.models import refresh_token  # noqa F401


async def init_db(engine: Optional[AsyncEngine] = None, drop_existing: bool = True) -> None:
    """Recria o schema (DROP ALL / CREATE ALL) na engine informada ou na engine da aplicação."""
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        if drop_existing:
            logger.info("Removendo todas as tabelas existentes (se houver)...")
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Criando tabelas: %s", ", ".join(Base.metadata.tables))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Inicialização do banco de dados concluída.")


async def main() -> None:
    try:
        await init_db()
    finally:
        await dispose_engine()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception:
        logger.exception("Ocorreu um erro durante a inicialização do banco de dados")
        raise
