"""
Roster Normalizer

Turns delimited text exported from school software (Pronote and
spreadsheets saved as CSV) into validated student and teacher records.

Steps:
1. Decode the raw bytes (UTF-8, or Windows-1252 / Latin-1 when UTF-8
   decoding shows the usual signs of a Windows export)
2. Detect the delimiter from the header line
3. Map header variants to canonical field names
4. Keep complete rows, report incomplete ones with their source line
"""

import csv
import logging
import re
from dataclasses import dataclass, field

from supchaissac.modules.shared.text import normalize_for_search
from supchaissac.modules.users.models import Civility

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ";"
DELIMITER_CANDIDATES = ("\t", ";", ",")

MISSING_STUDENT_DATA = "Donnees manquantes (nom, prenom ou classe)"
MISSING_TEACHER_DATA = "Donnees manquantes (login ou email, nom)"

_LINE_BREAK = re.compile(r"\r?\n")
_C1_CONTROLS = re.compile("[\x80-\x9f]")
_MOJIBAKE = re.compile("Ã©|Ã¨|Ã |Ã¹|Ãª|Ã®|Ã´|Ã»|Ã§|Ã‰|Ã€")
_BOMS = ("\ufeff", "\xef\xbb\xbf")

STUDENT_HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "last_name": ("Nom", "NOM", "nom"),
    "first_name": ("Prénom", "PRENOM", "prenom", "Prenom"),
    "birth_date": ("Né(e) le", "Date de naissance", "DATE_NAISSANCE", "Né le"),
    "usage_first_name": ("Prénom d'usage", "PRENOM_USAGE", "Prenom d'usage"),
    "gender": ("Sexe", "SEXE", "sexe"),
    "class_name": ("Classe", "CLASSE", "classe"),
    "accompaniment_project": ("Projet d'accompagnement", "PAP", "PPS", "PROJET"),
}

TEACHER_HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "login": ("login", "LOGIN", "Login", "identifiant"),
    "civility": ("civilite", "Civilité", "CIVILITE"),
    "last_name": ("nom", "Nom", "NOM"),
    "first_name": ("prenom", "Prénom", "PRENOM"),
    "email": ("email", "Email", "EMAIL", "mail"),
    "subject": ("discipline", "Discipline", "DISCIPLINE"),
    "classes": ("classes", "Classes", "CLASSES"),
    "pacte_status": ("statutPacte", "Statut PACTE", "STATUT_PACTE"),
}


@dataclass
class SourceRow:
    """A data row with its 1-based line number in the source file."""

    line: int
    values: dict[str, str]


@dataclass
class DelimitedTable:
    headers: list[str]
    delimiter: str
    rows: list[SourceRow] = field(default_factory=list)


@dataclass
class RejectedRow:
    line: int
    reason: str


@dataclass
class NormalizationResult:
    """Accepted records and the rows rejected with their reason."""

    accepted: list[dict] = field(default_factory=list)
    rejected: list[RejectedRow] = field(default_factory=list)


# ============================================
# Decoding and splitting
# ============================================


def _strip_bom(text: str) -> str:
    for bom in _BOMS:
        if text.startswith(bom):
            return text[len(bom) :]
    return text


def looks_misdecoded(text: str) -> bool:
    """Whether a UTF-8 decoding shows replacement chars, C1 controls or mojibake."""
    return "\ufffd" in text or bool(_C1_CONTROLS.search(text)) or bool(_MOJIBAKE.search(text))


def decode_bytes(raw: bytes) -> str:
    """
    Decode an uploaded file.

    UTF-8 is tried first. When the result looks like a Windows export read
    with the wrong charset, Windows-1252 then Latin-1 are tried; if both
    fail the UTF-8 text (with replacement characters) is kept.
    A leading byte order mark is removed.
    """
    text = raw.decode("utf-8", errors="replace")

    if looks_misdecoded(text):
        for encoding in ("cp1252", "latin-1"):
            try:
                decoded = raw.decode(encoding)
            except UnicodeDecodeError:
                continue
            logger.info(f"Roster file decoded as {encoding}")
            return _strip_bom(decoded)
        logger.warning("Roster file encoding not recognized, keeping UTF-8")

    return _strip_bom(text)


def detect_delimiter(header_line: str) -> str:
    """Tab, then semicolon, then comma; semicolon when none is present."""
    for candidate in DELIMITER_CANDIDATES:
        if candidate in header_line:
            return candidate
    return DEFAULT_DELIMITER


def _split_line(line: str, delimiter: str) -> list[str]:
    """Tokenize one line; quoted values may contain the delimiter."""
    values = next(csv.reader([line], delimiter=delimiter, skipinitialspace=True), [])
    return [value.strip() for value in values]


def parse_delimited(text: str) -> DelimitedTable:
    """
    Split decoded text into a header and data rows.

    The first non-blank line is the header. Data lines that are blank,
    carry fewer than two values, or only empty values are skipped.
    """
    lines = [(number, line) for number, line in enumerate(_LINE_BREAK.split(text), start=1)]
    lines = [(number, line) for number, line in lines if line.strip()]
    if not lines:
        logger.info("Roster file is empty")
        return DelimitedTable(headers=[], delimiter=DEFAULT_DELIMITER)

    _, header_line = lines[0]
    delimiter = detect_delimiter(header_line)
    headers = _split_line(header_line, delimiter)

    table = DelimitedTable(headers=headers, delimiter=delimiter)
    for number, line in lines[1:]:
        values = _split_line(line, delimiter)
        if len(values) < 2 or not any(values):
            continue
        row = {header: (values[i] if i < len(values) else "") for i, header in enumerate(headers)}
        table.rows.append(SourceRow(line=number, values=row))

    logger.info(
        f"Roster file parsed: {len(table.rows)} rows, delimiter {delimiter!r}, headers {headers}"
    )
    return table


# ============================================
# Header mapping
# ============================================


def map_headers(headers: list[str], synonyms: dict[str, tuple[str, ...]]) -> dict[str, str]:
    """
    Map each recognized header to its canonical field name.

    Matching ignores case and accents, so "PRÉNOM" and "prenom" both map
    to first_name. Unrecognized headers are left out.
    """
    lookup = {
        normalize_for_search(variant): canonical
        for canonical, variants in synonyms.items()
        for variant in variants
    }
    mapping = {}
    for header in headers:
        canonical = lookup.get(normalize_for_search(header))
        if canonical is not None:
            mapping[header] = canonical
    return mapping


def canonical_values(row: SourceRow, mapping: dict[str, str]) -> dict[str, str]:
    """
    Canonical view of a row.

    When several columns map to the same field, the first non-empty one wins.
    """
    values: dict[str, str] = {}
    for header, canonical in mapping.items():
        value = row.values.get(header, "").strip()
        if value and not values.get(canonical):
            values[canonical] = value
    return values


# ============================================
# Students
# ============================================


def normalize_student_rows(
    table: DelimitedTable,
    school_year: str,
    imported_by: str,
) -> NormalizationResult:
    """
    Build student records from a parsed roster.

    A row without last name, first name or class is rejected as a whole.
    Last names and classes are upper-cased.
    """
    mapping = map_headers(table.headers, STUDENT_HEADER_SYNONYMS)
    result = NormalizationResult()

    for row in table.rows:
        values = canonical_values(row, mapping)
        last_name = values.get("last_name")
        first_name = values.get("first_name")
        class_name = values.get("class_name")

        if not (last_name and first_name and class_name):
            result.rejected.append(RejectedRow(line=row.line, reason=MISSING_STUDENT_DATA))
            continue

        result.accepted.append(
            {
                "last_name": last_name.upper(),
                "first_name": first_name,
                "birth_date": values.get("birth_date"),
                "usage_first_name": values.get("usage_first_name"),
                "gender": values.get("gender"),
                "class_name": class_name.upper().strip(),
                "accompaniment_project": values.get("accompaniment_project"),
                "school_year": school_year,
                "imported_by": imported_by,
            }
        )

    return result


def preview_students(table: DelimitedTable, limit: int = 5) -> dict:
    """Summary shown before an import: mapping, classes, projects and first rows."""
    mapping = map_headers(table.headers, STUDENT_HEADER_SYNONYMS)
    rows = [canonical_values(row, mapping) for row in table.rows]

    classes = sorted({r["class_name"].upper().strip() for r in rows if r.get("class_name")})
    projects = sorted({r["accompaniment_project"] for r in rows if r.get("accompaniment_project")})

    return {
        "headers": table.headers,
        "mapping": mapping,
        "total_rows": len(rows),
        "classes_found": classes,
        "projects_found": projects,
        "preview": [
            {
                "last_name": r.get("last_name", ""),
                "first_name": r.get("first_name", ""),
                "class_name": r.get("class_name", "").upper(),
                "accompaniment_project": r.get("accompaniment_project", ""),
            }
            for r in rows[:limit]
        ],
    }


# ============================================
# Teachers
# ============================================


def parse_civility(value: str | None) -> Civility | None:
    if not value:
        return None
    value = value.strip()
    for civility in Civility:
        if value.lower() in (civility.value.lower(), civility.value.lower().rstrip(".")):
            return civility
    return None


def normalize_teacher_rows(table: DelimitedTable) -> NormalizationResult:
    """
    Build teacher account records from a Pronote staff export.

    The username is the login column, or the email when login is empty.
    "OUI" in the PACTE status column marks the teacher as in PACTE.
    """
    mapping = map_headers(table.headers, TEACHER_HEADER_SYNONYMS)
    result = NormalizationResult()

    for row in table.rows:
        values = canonical_values(row, mapping)
        username = values.get("login") or values.get("email")
        last_name = values.get("last_name")

        if not (username and last_name):
            result.rejected.append(RejectedRow(line=row.line, reason=MISSING_TEACHER_DATA))
            continue

        result.accepted.append(
            {
                "username": username.lower(),
                "civility": parse_civility(values.get("civility")),
                "first_name": values.get("first_name"),
                "last_name": last_name,
                "subject": values.get("subject"),
                "classes": values.get("classes"),
                "in_pacte": values.get("pacte_status", "").upper() == "OUI",
            }
        )

    return result
