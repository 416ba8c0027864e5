from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

def create_engine_and_sessionmaker(database_url: str) -> Tuple[AsyncEngine, async_sessionmaker]:
    """Build the async engine and session factory for the given URL."""
    if database_url.startswith("sqlite://"):
        database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        logger.info(f"Adjusted DATABASE_URL for aiosqlite: {database_url}")
    elif database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        logger.info(f"Adjusted DATABASE_URL for asyncpg: {database_url}")

    try:
        engine = create_async_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,
        )
        session_factory = async_sessionmaker(
            bind=engine,
            expire_on_commit=False,
            autoflush=False,
            class_=AsyncSession,
        )
        logger.info("Async database engine and session maker initialized.")
    except Exception as e:
        logger.error(f"Failed to initialize async database: {str(e)}", exc_info=True)
        raise
    return engine, session_factory
