"""Roster module - CSV and spreadsheet import helpers for students and teachers."""

from supchaissac.modules.roster.normalizer import (
    DelimitedTable,
    NormalizationResult,
    RejectedRow,
    decode_bytes,
    normalize_student_rows,
    normalize_teacher_rows,
    parse_delimited,
)
from supchaissac.modules.roster.spreadsheet import (
    ParsedStudent,
    StudentListResult,
    is_valid_excel_file,
    parse_student_list,
)

__all__ = [
    "DelimitedTable",
    "NormalizationResult",
    "RejectedRow",
    "decode_bytes",
    "normalize_student_rows",
    "normalize_teacher_rows",
    "parse_delimited",
    "ParsedStudent",
    "StudentListResult",
    "is_valid_excel_file",
    "parse_student_list",
]
