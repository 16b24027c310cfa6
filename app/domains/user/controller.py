"""User authentication controller endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from app.core.config import settings
from app.core.dependencies import get_optional_user, get_store
from app.domains.user.service import UserService
from app.schemas.base import ResponseSchema
from app.schemas.user import (
    AuthResponse,
    CurrentUserResponse,
    UserResponse,
    UserSigninRequest,
    UserSignupRequest,
)
from app.store.base import RecordStore
from app.store.records import UserRecord

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: UserSignupRequest,
    response: Response,
    store: RecordStore = Depends(get_store),
):
    """Register a new user and sign them in.

    The session token is returned only as an httpOnly cookie.
    """
    user_service = UserService(store)
    user, session = await user_service.signup(
        email=str(signup_data.email),
        password=signup_data.password,
        name=signup_data.name,
    )
    _set_session_cookie(response, session.token)

    return AuthResponse(user=UserResponse.model_validate(user), message="User created successfully")


@router.post("/signin", response_model=AuthResponse)
async def signin(
    signin_data: UserSigninRequest,
    response: Response,
    store: RecordStore = Depends(get_store),
):
    """Authenticate with email and password."""
    user_service = UserService(store)
    user, session = await user_service.signin(str(signin_data.email), signin_data.password)
    _set_session_cookie(response, session.token)

    return AuthResponse(user=UserResponse.model_validate(user), message="Login successful")


@router.post("/signout", response_model=ResponseSchema)
async def signout(
    request: Request,
    response: Response,
    store: RecordStore = Depends(get_store),
):
    """Sign out; always succeeds, even without a session."""
    user_service = UserService(store)
    await user_service.signout(request.cookies.get(settings.session_cookie_name))
    response.delete_cookie(settings.session_cookie_name, path="/")

    return ResponseSchema(status="success", message="Logout successful")


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(
    current_user: Optional[UserRecord] = Depends(get_optional_user),
):
    """Get current user information, or ``{"user": null}`` when anonymous."""
    if current_user is None:
        return CurrentUserResponse(user=None)
    return CurrentUserResponse(user=UserResponse.model_validate(current_user))
