from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000

class Settings(BaseSettings):
    port: Optional[str] = None
    host: str = "0.0.0.0"
    log_level: str = "INFO"

    # "memory" or "database"
    user_store_backend: str = "memory"
    database_url: str = "sqlite+aiosqlite:///./users.db"

    # Opt-in; stored passwords are compared as plain text otherwise
    hash_passwords: bool = False

    allowed_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )

    def resolve_port(self) -> int:
        """Port to bind, falling back to DEFAULT_PORT when PORT is unset or unparsable."""
        if not self.port:
            logger.warning(f"No port value specified, defaulting to {DEFAULT_PORT}")
            return DEFAULT_PORT
        try:
            return int(self.port, 10)
        except ValueError:
            logger.error(f"Invalid PORT value '{self.port}', defaulting to {DEFAULT_PORT}")
            return DEFAULT_PORT

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()
    except Exception as e:
        logging.getLogger(__name__).error(f"Error loading settings: {e}")
        raise ValueError(f"Could not load application settings: {e}")
