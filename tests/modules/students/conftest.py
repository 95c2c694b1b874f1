"""
Fixtures for student roster tests.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from supchaissac.modules.students.models import Student


def build_student(student_id: int, last_name: str, first_name: str, class_name: str):
    student = MagicMock(spec=Student)
    student.id = student_id
    student.last_name = last_name
    student.first_name = first_name
    student.class_name = class_name
    student.birth_date = None
    student.usage_first_name = None
    student.gender = None
    student.accompaniment_project = None
    student.school_year = "2025-2026"
    student.imported_by = "Administrateur"
    student.created_at = datetime(2025, 9, 1, tzinfo=UTC)
    return student


@pytest.fixture
def roster():
    """Pupils ordered by last name, as the repository returns them."""
    return [
        build_student(1, "ANDRE", "Élodie", "5B"),
        build_student(2, "DUPONT", "Léa", "6A"),
        build_student(3, "LEROY", "Hélène", "6A"),
        build_student(4, "MARTIN", "Tom", "4C"),
    ]


@pytest.fixture
def roster_csv() -> bytes:
    return (
        "Nom;Prénom;Classe;PAP\n"
        "dupont;Léa;6a;\n"
        "MARTIN;;6B;\n"
        "LEROY;Hélène;5c;PAP\n"
    ).encode("cp1252")
