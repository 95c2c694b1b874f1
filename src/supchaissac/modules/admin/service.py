"""
Admin Service Layer

Account management, teacher import from Pronote, dashboard figures and
the bulk reset of sessions. Every operation is restricted to ADMIN by
the router.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core import storage
from supchaissac.core.auth import CurrentUser
from supchaissac.core.email import EmailResult, send_activation_email
from supchaissac.core.errors import ConflictError, NotFoundError, ValidationError
from supchaissac.core.school_calendar import current_school_year, school_year_bounds
from supchaissac.core.security import (
    DEFAULT_PASSWORD,
    activation_token_expiry,
    generate_activation_token,
    hash_password,
)
from supchaissac.modules.admin.schemas import (
    AdminStats,
    RejectedLine,
    SessionCounts,
    SessionsResetResponse,
    TeacherImportResponse,
    UserCreate,
    UserUpdate,
)
from supchaissac.modules.attachments import repository as attachment_repository
from supchaissac.modules.pacte.service import percentage
from supchaissac.modules.roster.normalizer import (
    decode_bytes,
    normalize_teacher_rows,
    parse_delimited,
)
from supchaissac.modules.sessions import repository as session_repository
from supchaissac.modules.sessions.models import SessionStatus
from supchaissac.modules.shared.text import initials_for
from supchaissac.modules.users.models import User, UserRole
from supchaissac.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def initials_from_name(name: str) -> str:
    """First letters of the first two words ("Jean Dupont" -> "JD")."""
    return "".join(word[0] for word in name.split() if word)[:2].upper()


# ============================================
# Statistics
# ============================================


async def get_stats(db: AsyncSession) -> AdminStats:
    year = current_school_year()
    start, end = school_year_bounds(year)

    users = await UserRepository.list_all(db)
    teachers = [u for u in users if u.role == UserRole.TEACHER]
    in_pacte = [t for t in teachers if t.in_pacte]

    by_status = await session_repository.count_by_status(db, start, end)
    by_type = await session_repository.count_by_type(db, start, end)

    return AdminStats(
        school_year=year,
        total_users=len(users),
        total_teachers=len(teachers),
        teachers_with_pacte=len(in_pacte),
        teachers_without_pacte=len(teachers) - len(in_pacte),
        pacte_percentage=percentage(len(in_pacte), len(teachers)),
        sessions=SessionCounts(
            total=sum(by_status.values()),
            pending=by_status.get(SessionStatus.PENDING_REVIEW, 0)
            + by_status.get(SessionStatus.PENDING_VALIDATION, 0),
            validated=by_status.get(SessionStatus.VALIDATED, 0),
            paid=by_status.get(SessionStatus.PAID, 0),
            rejected=by_status.get(SessionStatus.REJECTED, 0),
        ),
        sessions_by_type={session_type.value: count for session_type, count in by_type.items()},
    )


# ============================================
# Users
# ============================================


async def list_users(db: AsyncSession, role: UserRole | None = None) -> list[User]:
    return await UserRepository.list_all(db, role=role)


async def create_user(db: AsyncSession, admin: CurrentUser, data: UserCreate) -> User:
    """
    Create an account.

    Raises:
        ConflictError: If the username is already taken
    """
    username = data.username.strip().lower()
    if await UserRepository.username_exists(db, username):
        raise ConflictError(f"Ce nom d'utilisateur existe déjà: {username}")

    if data.first_name or data.last_name:
        initials = initials_for(data.first_name, data.last_name)
    else:
        initials = initials_from_name(data.name)

    user = await UserRepository.create(
        db,
        username=username,
        password_hash=hash_password(data.password or DEFAULT_PASSWORD),
        name=data.name,
        role=data.role,
        first_name=data.first_name,
        last_name=data.last_name,
        civility=data.civility,
        subject=data.subject,
        initials=initials,
        in_pacte=data.in_pacte,
    )
    await db.commit()

    logger.info(f"Admin {admin.id} created user {user.id} ({user.role.value})")
    return user


async def update_user(db: AsyncSession, admin: CurrentUser, user_id: int, data: UserUpdate) -> User:
    """
    Update account fields. The password is not accepted here.

    Raises:
        NotFoundError: Unknown user
        ConflictError: New username already taken
    """
    user = await _get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    new_username = changes.get("username")
    if new_username is not None:
        new_username = new_username.strip().lower()
        if new_username != user.username and await UserRepository.username_exists(
            db, new_username
        ):
            raise ConflictError(f"Ce nom d'utilisateur existe déjà: {new_username}")
        changes["username"] = new_username

    if "first_name" in changes or "last_name" in changes:
        changes["initials"] = initials_for(
            changes.get("first_name", user.first_name),
            changes.get("last_name", user.last_name),
        )

    user = await UserRepository.update(db, user, **changes)
    logger.info(f"Admin {admin.id} updated user {user_id}: {sorted(changes)}")
    return user


async def delete_user(db: AsyncSession, admin: CurrentUser, user_id: int) -> None:
    """
    Delete an account.

    Raises:
        ValidationError: When deleting one's own account
        NotFoundError: Unknown user
        ConflictError: The user has declared sessions
    """
    if user_id == admin.id:
        raise ValidationError(
            "Impossible de supprimer votre propre compte", error_code="CANNOT_DELETE_SELF"
        )

    await _get_user(db, user_id)
    if await session_repository.count_for_teacher(db, user_id) > 0:
        raise ConflictError("Cet utilisateur a des sessions déclarées et ne peut être supprimé")

    await UserRepository.delete(db, user_id)
    logger.warning(f"Admin {admin.id} deleted user {user_id}")


async def reset_password(
    db: AsyncSession,
    admin: CurrentUser,
    user_id: int,
    new_password: str | None = None,
) -> None:
    user = await _get_user(db, user_id)
    await UserRepository.update(
        db, user, password_hash=hash_password(new_password or DEFAULT_PASSWORD)
    )
    logger.info(f"Admin {admin.id} reset the password of user {user_id}")


async def send_activation(db: AsyncSession, admin: CurrentUser, user_id: int) -> EmailResult:
    """
    Issue a fresh activation token and email the link.

    Raises:
        ValidationError: If the account is already activated
    """
    user = await _get_user(db, user_id)
    if user.is_activated:
        raise ValidationError("Ce compte est déjà activé", error_code="ALREADY_ACTIVATED")

    token = generate_activation_token()
    user = await UserRepository.update(
        db,
        user,
        activation_token=token,
        activation_token_expiry=activation_token_expiry(),
    )

    result = await send_activation_email(user.username, user.full_name, token)
    logger.info(f"Admin {admin.id} sent activation to user {user_id}: {result.message}")
    return result


# ============================================
# Teacher import
# ============================================


async def import_teachers(
    db: AsyncSession,
    admin: CurrentUser,
    content: bytes,
) -> TeacherImportResponse:
    """
    Create or update teacher accounts from a Pronote staff export.

    Accounts are matched by username. New accounts get the initial
    password and are not activated.

    Raises:
        ValidationError: If the file holds no data row
    """
    table = parse_delimited(decode_bytes(content))
    if not table.rows:
        raise ValidationError("Fichier CSV vide ou invalide.", error_code="EMPTY_FILE")

    result = normalize_teacher_rows(table)
    created = updated = 0

    for record in result.accepted:
        name = " ".join(p for p in (record["first_name"], record["last_name"]) if p)
        fields = {
            "name": name,
            "first_name": record["first_name"],
            "last_name": record["last_name"],
            "civility": record["civility"],
            "subject": record["subject"],
            "in_pacte": record["in_pacte"],
            "initials": initials_for(record["first_name"], record["last_name"]),
        }

        existing = await UserRepository.get_by_username(db, record["username"])
        if existing is not None:
            for key, value in fields.items():
                setattr(existing, key, value)
            updated += 1
        else:
            await UserRepository.create(
                db,
                username=record["username"],
                password_hash=hash_password(DEFAULT_PASSWORD),
                role=UserRole.TEACHER,
                **fields,
            )
            created += 1

    await db.commit()
    logger.info(
        f"Teacher import by admin {admin.id}: {created} created, {updated} updated, "
        f"{len(result.rejected)} rejected"
    )
    return TeacherImportResponse(
        created=created,
        updated=updated,
        errors=len(result.rejected),
        error_details=[RejectedLine(line=r.line, reason=r.reason) for r in result.rejected],
    )


# ============================================
# Bulk reset
# ============================================


async def reset_sessions(
    db: AsyncSession,
    admin: CurrentUser,
    confirm: bool,
    school_year: str | None = None,
) -> SessionsResetResponse:
    """
    Hard delete sessions, optionally only those of one school year.

    Attachment rows cascade; their stored files are then removed one by
    one, and a file that cannot be removed is only logged.

    Raises:
        ValidationError: Without confirmation or with a malformed year
    """
    if not confirm:
        raise ValidationError("Confirmation requise", error_code="CONFIRMATION_REQUIRED")

    start = end = None
    if school_year is not None:
        try:
            start, end = school_year_bounds(school_year)
        except ValueError as e:
            raise ValidationError(str(e), error_code="INVALID_SCHOOL_YEAR") from e

    keys = await attachment_repository.list_keys(db, start, end)
    deleted_sessions = await session_repository.delete_all(db, start, end)

    deleted_files = 0
    if keys and storage.is_storage_configured():
        for key in keys:
            try:
                await storage.delete_file(key)
                deleted_files += 1
            except (BotoCoreError, ClientError) as e:
                logger.error(f"Could not delete {key} during reset: {e}")

    logger.warning(
        f"Admin {admin.id} reset sessions ({school_year or 'all years'}): "
        f"{deleted_sessions} sessions, {deleted_files}/{len(keys)} files"
    )
    return SessionsResetResponse(
        deleted_sessions=deleted_sessions,
        deleted_files=deleted_files,
        school_year=school_year,
    )
