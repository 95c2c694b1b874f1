"""
Shared fixtures: mocked database session and one logged-in user per role.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from supchaissac.core.auth import CurrentUser
from supchaissac.core.security import hash_password
from supchaissac.modules.users.models import User, UserRole

@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db

@pytest.fixture
def teacher_user():
    return CurrentUser(
        id=10, username="jean.dupont@ac-nantes.fr", name="Jean Dupont", role=UserRole.TEACHER
    )

@pytest.fixture
def other_teacher_user():
    return CurrentUser(
        id=11, username="marie.durand@ac-nantes.fr", name="Marie Durand", role=UserRole.TEACHER
    )

@pytest.fixture
def secretary_user():
    return CurrentUser(
        id=20, username="secretariat@ac-nantes.fr", name="Secrétariat", role=UserRole.SECRETARY
    )

@pytest.fixture
def principal_user():
    return CurrentUser(
        id=30, username="principal@ac-nantes.fr", name="Principal", role=UserRole.PRINCIPAL
    )

@pytest.fixture
def admin_user():
    return CurrentUser(
        id=1, username="admin@supchaissac.fr", name="Administrateur", role=UserRole.ADMIN
    )

@pytest.fixture
def make_user():
    """Factory for transient User rows with every non-null column filled in."""

    def build(user_id: int = 10, role: UserRole = UserRole.TEACHER, **overrides) -> User:
        values = {
            "id": user_id,
            "username": "jean.dupont@ac-nantes.fr",
            "password_hash": hash_password("motdepasse123"),
            "name": "Jean Dupont",
            "first_name": "Jean",
            "last_name": "Dupont",
            "initials": "JD",
            "role": role,
            "in_pacte": False,
            "pacte_hours_target": 0,
            "pacte_hours_completed": 0,
            "pacte_hours_df": 0,
            "pacte_hours_rcd": 0,
            "pacte_hours_completed_df": 0,
            "pacte_hours_completed_rcd": 0,
            "is_activated": True,
            "activation_token": None,
            "activation_token_expiry": None,
            "created_at": datetime(2025, 9, 1, tzinfo=UTC),
            "updated_at": datetime(2025, 9, 1, tzinfo=UTC),
        }
        values.update(overrides)
        return User(**values)

    return build

@pytest.fixture
def api_client(mock_db):
    """
    Build a TestClient logged in as the given user (None for anonymous).

    The database dependency yields ``mock_db``; overrides are removed on teardown.
    """
    from fastapi.testclient import TestClient

    from supchaissac.core.auth import get_current_user, get_optional_user
    from supchaissac.core.database import get_db
    from supchaissac.core.errors import AuthenticationRequiredError
    from supchaissac.main import app

    async def override_db():
        yield mock_db

    def build(user: CurrentUser | None) -> TestClient:
        async def override_user() -> CurrentUser:
            if user is None:
                raise AuthenticationRequiredError()
            return user

        async def override_optional_user() -> CurrentUser | None:
            return user

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_current_user] = override_user
        app.dependency_overrides[get_optional_user] = override_optional_user
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()
