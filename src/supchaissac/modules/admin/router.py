"""
Admin Router (ADMIN only)

Endpoints:
- GET /admin/stats - Dashboard figures
- GET /admin/users - List accounts
- POST /admin/users - Create an account
- PATCH /admin/users/{id} - Update an account (not the password)
- DELETE /admin/users/{id} - Delete an account
- POST /admin/users/{id}/reset-password - Reset a password
- POST /admin/users/{id}/send-activation - Email an activation link
- POST /admin/import - Import teachers from a Pronote CSV
- POST /admin/sessions/reset - Delete sessions in bulk
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser, require_admin
from supchaissac.core.database import get_db
from supchaissac.modules.admin import service
from supchaissac.modules.admin.schemas import (
    ActivationResponse,
    AdminStats,
    MessageResponse,
    ResetPasswordRequest,
    SessionsResetRequest,
    SessionsResetResponse,
    TeacherImportResponse,
    UserCreate,
    UserUpdate,
)
from supchaissac.modules.users.models import UserRole
from supchaissac.modules.users.schemas import UserResponse

router = APIRouter()


@router.get("/stats", response_model=AdminStats, summary="Dashboard statistics")
async def stats(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminStats:
    return await service.get_stats(db)


@router.get("/users", response_model=list[UserResponse], summary="List users")
async def list_users(
    role: UserRole | None = Query(None),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserResponse]:
    users = await service.list_users(db, role=role)
    return [UserResponse.model_validate(u) for u in users]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    responses={409: {"description": "Username already taken"}},
)
async def create_user(
    data: UserCreate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await service.create_user(db, admin, data)
    return UserResponse.model_validate(user)


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    responses={404: {"description": "User not found"}, 409: {"description": "Username taken"}},
)
async def update_user(
    user_id: int,
    data: UserUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await service.update_user(db, admin, user_id, data)
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    responses={
        400: {"description": "Own account"},
        404: {"description": "User not found"},
        409: {"description": "User has declared sessions"},
    },
)
async def delete_user(
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    await service.delete_user(db, admin, user_id)


@router.post(
    "/users/{user_id}/reset-password",
    response_model=MessageResponse,
    summary="Reset a password",
    description="Without `new_password` the initial password is restored.",
)
async def reset_password(
    user_id: int,
    data: ResetPasswordRequest | None = None,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    new_password = data.new_password if data else None
    await service.reset_password(db, admin, user_id, new_password)
    return MessageResponse(message="Mot de passe réinitialisé")


@router.post(
    "/users/{user_id}/send-activation",
    response_model=ActivationResponse,
    summary="Send an activation link",
    description="""
Generates a 7-day activation token. The email is only sent when email is
enabled and the address is academic; otherwise the link is returned.
""",
)
async def send_activation(
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ActivationResponse:
    result = await service.send_activation(db, admin, user_id)
    return ActivationResponse(sent=result.sent, message=result.message, link=result.link)


@router.post(
    "/import",
    response_model=TeacherImportResponse,
    summary="Import teachers",
    description="""
Pronote staff CSV with columns `login`, `civilite`, `nom`, `prenom`,
`email`, `discipline`, `classes`, `statutPacte`. Accounts are matched by
login (or email); `statutPacte` = OUI marks the teacher as in PACTE.
""",
)
async def import_teachers(
    file: UploadFile = File(...),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> TeacherImportResponse:
    content = await file.read()
    return await service.import_teachers(db, admin, content)


@router.post(
    "/sessions/reset",
    response_model=SessionsResetResponse,
    summary="Delete sessions in bulk",
    description="""
Irreversible. Requires `confirm: true`. With `school_year` only the
sessions dated within that year are deleted. Attachments go with them.
""",
)
async def reset_sessions(
    data: SessionsResetRequest,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SessionsResetResponse:
    return await service.reset_sessions(db, admin, data.confirm, data.school_year)
