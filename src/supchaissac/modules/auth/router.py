"""
Auth Router

Endpoints:
- POST /auth/login - Open a cookie session (rate limited)
- POST /auth/logout - Close it
- GET /auth/me - Current account
- PATCH /auth/profile - Usage first name and password
- GET /auth/status - Whether the request carries a valid session
- GET /auth/verify-token/{token} - Check an activation link
- POST /auth/activate - Choose a password with an activation token
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import (
    CurrentUser,
    get_current_user,
    get_optional_user,
    get_session_store,
)
from supchaissac.core.config import settings
from supchaissac.core.cookie_session import (
    CookieSessionStore,
    clear_session_cookie,
    set_session_cookie,
    unsign_session_id,
)
from supchaissac.core.database import get_db
from supchaissac.core.rate_limit import LOGIN_ATTEMPTS_LIMIT, LOGIN_WINDOW_SECONDS, rate_limit
from supchaissac.modules.auth import service
from supchaissac.modules.auth.schemas import (
    ActivationRequest,
    AuthStatusResponse,
    LoginRequest,
    MessageResponse,
    ProfileUpdate,
    TokenCheckResponse,
)
from supchaissac.modules.users.schemas import UserResponse

router = APIRouter()


@router.post(
    "/login",
    response_model=UserResponse,
    summary="Log in",
    responses={
        401: {"description": "Invalid credentials"},
        429: {"description": "Too many attempts"},
    },
)
@rate_limit(limit=LOGIN_ATTEMPTS_LIMIT, window_seconds=LOGIN_WINDOW_SECONDS)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
    store: CookieSessionStore = Depends(get_session_store),
) -> UserResponse:
    """
    Authenticate with username and password.

    On success a server-side session is created and its signed id is set
    in the HttpOnly session cookie. At most 5 attempts per 15 minutes are
    accepted from one client address.
    """
    user = await service.authenticate(db, credentials.username, credentials.password)
    session_id = await store.create(user.id, user.role.value)
    set_session_cookie(response, session_id)
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(
    request: Request,
    response: Response,
    store: CookieSessionStore = Depends(get_session_store),
) -> MessageResponse:
    """Destroy the server-side session and clear the cookie. Safe to call twice."""
    session_id = unsign_session_id(request.cookies.get(settings.session_cookie_name))
    if session_id is not None:
        await store.destroy(session_id)
    clear_session_cookie(response)
    return MessageResponse(message="Déconnexion réussie")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
    responses={401: {"description": "Not authenticated"}},
)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await service.get_profile(db, current_user)
    return UserResponse.model_validate(user)


@router.patch(
    "/profile",
    response_model=UserResponse,
    summary="Update own profile",
    responses={400: {"description": "Password change rejected"}},
)
async def update_profile(
    data: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await service.update_profile(db, current_user, data)
    return UserResponse.model_validate(user)


@router.get("/status", response_model=AuthStatusResponse, summary="Session status")
async def auth_status(
    current_user: CurrentUser | None = Depends(get_optional_user),
) -> AuthStatusResponse:
    if current_user is None:
        return AuthStatusResponse(authenticated=False)
    return AuthStatusResponse(
        authenticated=True,
        name=current_user.name,
        role=current_user.role.value,
    )


@router.get(
    "/verify-token/{token}",
    response_model=TokenCheckResponse,
    summary="Check an activation token",
    responses={
        400: {"description": "Already activated or expired"},
        404: {"description": "Unknown token"},
    },
)
async def verify_token(token: str, db: AsyncSession = Depends(get_db)) -> TokenCheckResponse:
    user = await service.verify_activation_token(db, token)
    return TokenCheckResponse(name=user.full_name, username=user.username)


@router.post(
    "/activate",
    response_model=MessageResponse,
    summary="Activate an account",
    responses={
        400: {"description": "Already activated or expired"},
        404: {"description": "Unknown token"},
    },
)
async def activate(data: ActivationRequest, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await service.activate_account(db, data.token, data.password)
    return MessageResponse(
        message="Compte activé avec succès. Vous pouvez maintenant vous connecter."
    )
