from passlib.context import CryptContext
import logging

logger = logging.getLogger(__name__)

class PasswordHasher:
    """
    Prepares passwords for storage and checks candidates against them.

    With hashing disabled (the default) passwords are stored and compared
    verbatim. Enabling it switches to passlib's pbkdf2_sha256.
    """

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self._context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto") if enabled else None

    def hash(self, password: str) -> str:
        if not self.enabled:
            return password
        logger.debug("Hashing password...")
        return self._context.hash(password)

    def verify(self, plain_password: str, stored_password: str) -> bool:
        if not self.enabled:
            return plain_password == stored_password
        try:
            return self._context.verify(plain_password, stored_password)
        except (ValueError, TypeError) as e:
            # Stored value is not a recognised hash
            logger.error(f"Error verifying password: {str(e)}")
            return False
