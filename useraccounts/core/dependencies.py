"""
Core dependency providers for the application.
"""
from fastapi import Request
import logging

from ..config import Settings
from ..services.passwords import PasswordHasher
from ..services.user_store import InMemoryUserStore, UserStore

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "database")

def build_user_store(settings: Settings) -> UserStore:
    """Construct the user store selected by USER_STORE_BACKEND."""
    backend = settings.user_store_backend.lower()
    password_hasher = PasswordHasher(enabled=settings.hash_passwords)
    if settings.hash_passwords:
        logger.info("Password hashing enabled (pbkdf2_sha256).")

    if backend == "memory":
        return InMemoryUserStore(password_hasher=password_hasher)
    if backend == "database":
        from ..services.sql_user_store import SqlAlchemyUserStore
        return SqlAlchemyUserStore(database_url=settings.database_url, password_hasher=password_hasher)
    raise ValueError(
        f"Unknown USER_STORE_BACKEND '{settings.user_store_backend}'. Expected one of: {', '.join(STORE_BACKENDS)}"
    )

# --- User Store --- #
def get_user_store(request: Request) -> UserStore:
    # Each app instance owns its store; see main.create_app
    return request.app.state.user_store
