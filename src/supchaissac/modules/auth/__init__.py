"""Authentication module - cookie sessions and account activation."""

from supchaissac.modules.auth.router import router
from supchaissac.modules.auth.schemas import (
    ActivationRequest,
    AuthStatusResponse,
    LoginRequest,
    ProfileUpdate,
    TokenCheckResponse,
)

__all__ = [
    "router",
    "LoginRequest",
    "ProfileUpdate",
    "ActivationRequest",
    "TokenCheckResponse",
    "AuthStatusResponse",
]
