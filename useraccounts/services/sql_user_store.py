from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from typing import List, Optional
import logging

from ..database.database import create_engine_and_sessionmaker
from ..database.models import Base, UserRecord
from ..models.user import User
from ..schemas.user import UserCreate, UserUpdate
from .passwords import PasswordHasher
from .user_store import UserStore, new_user_id

logger = logging.getLogger(__name__)

def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        username=record.username,
        email=record.email,
        password=record.password,
    )

class SqlAlchemyUserStore(UserStore):
    """
    User store persisted through SQLAlchemy's asyncio extension.

    The unique index on `users.email` rejects a duplicate that slips past the
    router's check-then-create sequence; the resulting IntegrityError is
    reported by the route as a server error.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        password_hasher: Optional[PasswordHasher] = None,
        engine: Optional[AsyncEngine] = None,
        session_factory: Optional[async_sessionmaker] = None,
    ):
        super().__init__(password_hasher)
        if engine is None or session_factory is None:
            if not database_url:
                raise ValueError("database_url is required when no engine is supplied")
            engine, session_factory = create_engine_and_sessionmaker(database_url)
        self.engine = engine
        self.session_factory = session_factory

    async def startup(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("User tables created or already present.")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create user tables: {e}", exc_info=True)
            raise

    async def shutdown(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed.")

    async def find_all(self) -> List[User]:
        async with self.session_factory() as session:
            result = await session.execute(select(UserRecord))
            return [_to_user(record) for record in result.scalars().all()]

    async def find_one(self, user_id: str) -> Optional[User]:
        async with self.session_factory() as session:
            record = await session.get(UserRecord, user_id)
            return _to_user(record) if record else None

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(UserRecord).filter(UserRecord.email == email)
            )
            record = result.scalars().first()
            return _to_user(record) if record else None

    async def create(self, user_data: UserCreate) -> User:
        record = UserRecord(
            id=new_user_id(),
            username=user_data.username,
            email=user_data.email,
            password=self.password_hasher.hash(user_data.password),
        )
        async with self.session_factory() as session:
            session.add(record)
            await session.commit()
            logger.debug(f"Created user {record.id}")
            return _to_user(record)

    async def update(self, user_id: str, user_data: UserUpdate) -> Optional[User]:
        async with self.session_factory() as session:
            record = await session.get(UserRecord, user_id)
            if not record:
                return None
            record.username = user_data.username
            record.email = user_data.email
            record.password = self.password_hasher.hash(user_data.password)
            await session.commit()
            logger.debug(f"Updated user {user_id}")
            return _to_user(record)

    async def remove(self, user_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(UserRecord).where(UserRecord.id == user_id)
            )
            await session.commit()
            removed = result.rowcount > 0
            if removed:
                logger.debug(f"Removed user {user_id}")
            return removed
