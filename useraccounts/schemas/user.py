"""Pydantic schemas for user request bodies and responses."""

from pydantic import BaseModel, ConfigDict, Field

class UserCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    username: str = Field(..., description="Display name")
    email: str = Field(..., description="Unique email address")
    password: str = Field(..., description="Password used for login")

class UserUpdate(UserCreate):
    pass

class LoginRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    email: str = Field(..., description="Registered email address")
    password: str = Field(..., description="Password to compare")

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="The unique identifier for the user.")
    username: str
    email: str
    password: str
