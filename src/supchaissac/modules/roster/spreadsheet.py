"""
Spreadsheet Student Lists

Reads the list of pupils attached to a homework-help session from the
first sheet of an Excel file. Accepted row shapes:

    NOM | Prénom | Classe
    NOM Prénom | Classe
    NOM Prénom Classe          (single cell)

Leading blank rows are ignored; the first non-empty row is skipped when
it contains header keywords.
"""

import io
import logging
import re
import zipfile
from dataclasses import dataclass, field

import pandas as pd

from supchaissac.core.errors import ValidationError
from supchaissac.core.storage import EXCEL_MIME_TYPES
from supchaissac.modules.shared.text import title_case

logger = logging.getLogger(__name__)

HEADER_KEYWORDS = (
    "nom",
    "prenom",
    "prénom",
    "classe",
    "name",
    "first",
    "last",
    "eleve",
    "élève",
)

EXCEL_EXTENSIONS = (".xlsx", ".xls")

_WHITESPACE = re.compile(r"\s+")
_NAME_SEPARATORS = re.compile(r"[\s-]+")


@dataclass
class ParsedStudent:
    last_name: str
    first_name: str
    class_name: str


@dataclass
class StudentListResult:
    students: list[ParsedStudent] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_rows: int = 0

    @property
    def success_count(self) -> int:
        return len(self.students)


def is_valid_excel_file(mime_type: str | None, filename: str | None) -> bool:
    """Excel by MIME type or by extension."""
    if mime_type in EXCEL_MIME_TYPES:
        return True
    return bool(filename) and filename.lower().endswith(EXCEL_EXTENSIONS)


def format_first_name(value: str) -> str:
    """Title-case a first name; hyphens become spaces ("jean-luc" -> "Jean Luc")."""
    return " ".join(title_case(part) for part in _NAME_SEPARATORS.split(value) if part)


def is_header_row(cells: list[str]) -> bool:
    text = " ".join(cells).lower()
    return any(keyword in text for keyword in HEADER_KEYWORDS)


def _clean_cells(raw_row) -> list[str]:
    """Cell texts with the trailing empty cells removed."""
    cells = ["" if pd.isna(cell) else str(cell).strip() for cell in raw_row]
    while cells and not cells[-1]:
        cells.pop()
    return cells


def parse_row(cells: list[str]) -> ParsedStudent | None:
    """
    Extract a pupil from one row.

    Returns None when the row is incomplete (no last name, or a last
    name shorter than two characters).
    """
    last_name = first_name = class_name = ""

    if len(cells) >= 3:
        last_name = cells[0].upper()
        first_name = format_first_name(cells[1])
        class_name = cells[2].upper()
    elif len(cells) == 2:
        parts = _WHITESPACE.split(cells[0])
        if len(parts) >= 2:
            last_name = parts[0].upper()
            first_name = format_first_name(" ".join(parts[1:]))
        else:
            last_name = cells[0].upper()
        class_name = cells[1].upper()
    elif len(cells) == 1:
        parts = _WHITESPACE.split(cells[0])
        if len(parts) >= 3:
            last_name = parts[0].upper()
            first_name = format_first_name(" ".join(parts[1:-1]))
            class_name = parts[-1].upper()
        elif len(parts) == 2:
            last_name = parts[0].upper()
            class_name = parts[1].upper()
        else:
            return None

    if len(last_name) < 2:
        return None
    return ParsedStudent(last_name=last_name, first_name=first_name, class_name=class_name)


def read_first_sheet(content: bytes) -> list[list[str]]:
    """
    Rows of the first sheet as lists of cell texts.

    Raises:
        ValidationError: If the file cannot be read as a spreadsheet
    """
    try:
        frame = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=str)
    except (ValueError, OSError, KeyError, zipfile.BadZipFile) as e:
        logger.warning(f"Unreadable spreadsheet: {e}")
        raise ValidationError("Fichier Excel illisible.", error_code="INVALID_SPREADSHEET") from e

    return [_clean_cells(row) for row in frame.itertuples(index=False, name=None)]


def parse_student_list(content: bytes) -> StudentListResult:
    """
    Parse a pupil list from an Excel file.

    Line numbers in error messages are 1-based sheet rows.
    """
    rows = read_first_sheet(content)
    result = StudentListResult()

    first = next((index for index, cells in enumerate(rows) if any(cells)), len(rows))
    start = first + 1 if first < len(rows) and is_header_row(rows[first]) else first
    for index in range(start, len(rows)):
        cells = rows[index]
        if not any(cells):
            continue

        result.total_rows += 1
        student = parse_row(cells)
        if student is None:
            result.errors.append(f"Ligne {index + 1}: donnees incompletes")
        else:
            result.students.append(student)

    logger.info(
        f"Student list parsed: {result.success_count}/{result.total_rows} rows, "
        f"{len(result.errors)} errors"
    )
    return result
