"""
Database models for the user accounts service.

Only used by the SQL-backed user store.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class UserRecord(Base):
    """
    Persisted user account.

    Attributes:
        id: UUID4 string assigned at creation
        username: Display name
        email: Unique email for login
        password: Stored password (plain or hashed, see HASH_PASSWORDS)
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    username = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
