"""
API routes for registering, authenticating and managing user accounts.
"""
import logging
from typing import Any, Dict, Iterable

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ...core.dependencies import get_user_store
from ...schemas.user import LoginRequest, UserCreate, UserResponse, UserUpdate
from ...services.user_store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter()

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

async def read_body(request: Request) -> Dict[str, Any]:
    """Parse a JSON or urlencoded body into a dict; anything else reads as empty."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPE):
        form = await request.form()
        return dict(form)
    if not content_type.startswith(JSON_CONTENT_TYPE):
        return {}

    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        # JSONDecodeError and UnicodeDecodeError
        logger.warning("Request body is not valid JSON; treating it as empty")
        return {}
    return body if isinstance(body, dict) else {}

def has_required_fields(body: Dict[str, Any], fields: Iterable[str]) -> bool:
    return all(body.get(field) for field in fields)

def serialize(user) -> Dict[str, Any]:
    return UserResponse.model_validate(user).model_dump()

def error_response(status_code: int, message: str, key: str = "error") -> JSONResponse:
    return JSONResponse(status_code=status_code, content={key: message})

def server_error(e: Exception) -> JSONResponse:
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

@router.get("/users", summary="List all users")
async def list_users(store: UserStore = Depends(get_user_store)) -> JSONResponse:
    try:
        all_users = await store.find_all()
        if not all_users:
            return error_response(status.HTTP_404_NOT_FOUND, "No users at this time", key="message")
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"totalUsers": len(all_users), "allUsers": [serialize(u) for u in all_users]},
        )
    except Exception as e:
        logger.error(f"Listing users failed with error: {str(e)}", exc_info=True)
        return server_error(e)

@router.get("/users/{user_id}", summary="Get a user by id")
async def get_user(user_id: str, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    try:
        user = await store.find_one(user_id)
        if not user:
            logger.warning(f"User {user_id} not found")
            return error_response(status.HTTP_404_NOT_FOUND, "User not found", key="message")
        return JSONResponse(status_code=status.HTTP_200_OK, content={"user": serialize(user)})
    except Exception as e:
        logger.error(f"Fetching user {user_id} failed with error: {str(e)}", exc_info=True)
        return server_error(e)

@router.post("/register", summary="Register a new user")
async def register(request: Request, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    try:
        body = await read_body(request)
        if not has_required_fields(body, ("username", "email", "password")):
            return error_response(status.HTTP_400_BAD_REQUEST, "All fields are required")

        user_data = UserCreate.model_validate(body)
        logger.debug(f"Attempting to register user with email: {user_data.email}")

        existing_user = await store.find_by_email(user_data.email)
        if existing_user:
            logger.warning(f"Registration failed: Email already exists: {user_data.email}")
            return error_response(status.HTTP_409_CONFLICT, "This email has already been registered")

        new_user = await store.create(user_data)
        logger.info(f"User registered successfully: {new_user.id}")
        return JSONResponse(status_code=status.HTTP_201_CREATED, content={"newUser": serialize(new_user)})
    except Exception as e:
        logger.error(f"Registration failed with error: {str(e)}", exc_info=True)
        return server_error(e)

@router.post("/login", summary="Check a user's credentials")
async def login(request: Request, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    try:
        body = await read_body(request)
        if not has_required_fields(body, ("email", "password")):
            return error_response(status.HTTP_400_BAD_REQUEST, "Please provide all required parameters")

        credentials = LoginRequest.model_validate(body)
        user = await store.compare_password(credentials.email, credentials.password)
        if not user:
            logger.warning(f"Login failed for email: {credentials.email}")
            return error_response(status.HTTP_401_UNAUTHORIZED, "Invalid email or password")

        logger.info(f"User logged in successfully: {user.id}")
        return JSONResponse(status_code=status.HTTP_200_OK, content={"user": serialize(user)})
    except Exception as e:
        logger.error(f"Login failed with error: {str(e)}", exc_info=True)
        return server_error(e)

@router.put("/users/{user_id}", summary="Replace a user's details")
async def update_user(user_id: str, request: Request, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    try:
        body = await read_body(request)
        if not has_required_fields(body, ("username", "email", "password")):
            return error_response(status.HTTP_400_BAD_REQUEST, "Please provide all required parameters")

        updated_user = await store.update(user_id, UserUpdate.model_validate(body))
        if not updated_user:
            logger.warning(f"Update failed: no user with id {user_id}")
            return error_response(status.HTTP_404_NOT_FOUND, f"No user with id {user_id}")

        logger.info(f"User {user_id} updated")
        return JSONResponse(status_code=status.HTTP_200_OK, content={"updatedUser": serialize(updated_user)})
    except Exception as e:
        logger.error(f"Updating user {user_id} failed with error: {str(e)}", exc_info=True)
        return server_error(e)

@router.delete("/users/{user_id}", summary="Delete a user")
async def delete_user(user_id: str, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    try:
        removed = await store.remove(user_id)
        if not removed:
            logger.warning(f"Delete failed: user {user_id} does not exist")
            return error_response(status.HTTP_404_NOT_FOUND, "User does not exist")

        logger.info(f"User {user_id} deleted")
        return JSONResponse(status_code=status.HTTP_200_OK, content={"message": "User deleted successfully"})
    except Exception as e:
        logger.error(f"Deleting user {user_id} failed with error: {str(e)}", exc_info=True)
        return server_error(e)
