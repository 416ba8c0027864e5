"""
User record store.

`UserStore` is the boundary the API routes depend on; `InMemoryUserStore`
keeps records in a dict keyed by id with a secondary email index.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging
import uuid

from ..models.user import User
from ..schemas.user import UserCreate, UserUpdate
from .passwords import PasswordHasher

logger = logging.getLogger(__name__)

def new_user_id() -> str:
    return str(uuid.uuid4())

class UserStore(ABC):
    """Storage operations for user accounts. All methods are coroutines."""

    def __init__(self, password_hasher: Optional[PasswordHasher] = None):
        self.password_hasher = password_hasher or PasswordHasher()

    async def startup(self) -> None:
        """Called once when the application starts."""

    async def shutdown(self) -> None:
        """Called once when the application stops."""

    @abstractmethod
    async def find_all(self) -> List[User]:
        """Return every stored user, in no particular order."""

    @abstractmethod
    async def find_one(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def create(self, user_data: UserCreate) -> User:
        """
        Store a new user under a freshly generated id.

        Email uniqueness is the caller's responsibility.
        """

    @abstractmethod
    async def update(self, user_id: str, user_data: UserUpdate) -> Optional[User]:
        """Replace username, email and password. Returns None for an unknown id."""

    @abstractmethod
    async def remove(self, user_id: str) -> bool:
        """Delete a user. Returns whether anything was deleted."""

    async def compare_password(self, email: str, password: str) -> Optional[User]:
        """Return the user registered under `email` if `password` matches."""
        user = await self.find_by_email(email)
        if not user:
            return None
        if not self.password_hasher.verify(password, user.password):
            return None
        return user

class InMemoryUserStore(UserStore):
    """
    Dict-backed store.

    Operations never suspend, so each one is atomic on the event loop.

    Examples:
        >>> store = InMemoryUserStore()
        >>> user = await store.create(UserCreate(username="ana", email="ana@example.com", password="pw"))
        >>> await store.find_by_email("ana@example.com")
    """

    def __init__(self, password_hasher: Optional[PasswordHasher] = None):
        super().__init__(password_hasher)
        self._users: Dict[str, User] = {}
        self._ids_by_email: Dict[str, str] = {}

    async def find_all(self) -> List[User]:
        return list(self._users.values())

    async def find_one(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        user_id = self._ids_by_email.get(email)
        if user_id is None:
            return None
        return self._users.get(user_id)

    async def create(self, user_data: UserCreate) -> User:
        user = User(
            id=new_user_id(),
            username=user_data.username,
            email=user_data.email,
            password=self.password_hasher.hash(user_data.password),
        )
        self._users[user.id] = user
        self._ids_by_email[user.email] = user.id
        logger.debug(f"Created user {user.id}")
        return user

    async def update(self, user_id: str, user_data: UserUpdate) -> Optional[User]:
        user = self._users.get(user_id)
        if not user:
            return None

        self._unindex_email(user.email, user_id)
        user.username = user_data.username
        user.email = user_data.email
        user.password = self.password_hasher.hash(user_data.password)
        self._ids_by_email[user.email] = user_id
        logger.debug(f"Updated user {user_id}")
        return user

    async def remove(self, user_id: str) -> bool:
        user = self._users.pop(user_id, None)
        if not user:
            return False
        self._unindex_email(user.email, user_id)
        logger.debug(f"Removed user {user_id}")
        return True

    def _unindex_email(self, email: str, user_id: str) -> None:
        # An update may have given another record the same email; keep it reachable.
        if self._ids_by_email.get(email) != user_id:
            return
        del self._ids_by_email[email]
        for other in self._users.values():
            if other.id != user_id and other.email == email:
                self._ids_by_email[email] = other.id
                break

    def clear(self) -> None:
        """Drop all users. Useful for test cleanup."""
        self._users.clear()
        self._ids_by_email.clear()

    def count(self) -> int:
        return len(self._users)
