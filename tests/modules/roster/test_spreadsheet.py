"""
Unit tests for Excel pupil lists.
"""

import io

import pytest
from openpyxl import Workbook

from supchaissac.core.errors import ValidationError
from supchaissac.modules.roster.spreadsheet import (
    ParsedStudent,
    format_first_name,
    is_header_row,
    is_valid_excel_file,
    parse_row,
    parse_student_list,
)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def build_workbook(rows: list[list[str]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestParseRow:
    """Tests for the three accepted row shapes."""

    def test_three_columns(self):
        assert parse_row(["dupont", "jean-luc", "6a"]) == ParsedStudent("DUPONT", "Jean Luc", "6A")

    def test_name_then_class(self):
        assert parse_row(["DUPONT Léa", "6A"]) == ParsedStudent("DUPONT", "Léa", "6A")

    def test_single_cell(self):
        assert parse_row(["DUPONT Léa Marie 6A"]) == ParsedStudent("DUPONT", "Léa Marie", "6A")

    def test_single_cell_without_first_name(self):
        assert parse_row(["DUPONT 6A"]) == ParsedStudent("DUPONT", "", "6A")

    @pytest.mark.parametrize("cells", [["X", "6A"], ["DUPONT"], []])
    def test_incomplete(self, cells):
        assert parse_row(cells) is None


class TestHelpers:
    def test_format_first_name(self):
        assert format_first_name("MARIE-LOU") == "Marie Lou"

    def test_header_row(self):
        assert is_header_row(["NOM", "Prénom", "Classe"]) is True
        assert is_header_row(["DUPONT", "Léa", "6A"]) is False

    def test_excel_detection(self):
        assert is_valid_excel_file(XLSX_MIME, "liste.bin") is True
        assert is_valid_excel_file("application/octet-stream", "LISTE.XLS") is True
        assert is_valid_excel_file("application/pdf", "liste.pdf") is False
        assert is_valid_excel_file(None, None) is False


class TestParseStudentList:
    """Tests for parse_student_list on real workbooks."""

    def test_header_skipped_and_errors_numbered(self):
        content = build_workbook(
            [
                ["Nom", "Prénom", "Classe"],
                ["DUPONT", "Léa", "6A"],
                ["X", "Tom", "6B"],
                ["MARTIN Paul", "5C"],
            ]
        )

        result = parse_student_list(content)

        assert result.total_rows == 3
        assert result.success_count == 2
        assert result.students[1] == ParsedStudent("MARTIN", "Paul", "5C")
        assert result.errors == ["Ligne 3: donnees incompletes"]

    def test_header_after_blank_row(self):
        content = build_workbook(
            [
                [],
                ["NOM", "Prénom", "Classe"],
                ["DUPONT", "Jean", "6A"],
                ["X", "Tom", "6B"],
            ]
        )

        result = parse_student_list(content)

        assert [student.last_name for student in result.students] == ["DUPONT"]
        assert result.total_rows == 2
        assert result.errors == ["Ligne 4: donnees incompletes"]

    def test_without_header(self):
        result = parse_student_list(build_workbook([["DUPONT Léa 6A"], ["MARTIN Tom 6B"]]))

        assert result.success_count == 2
        assert result.errors == []

    def test_unreadable_file(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_student_list(b"definitely not a workbook")
        assert exc_info.value.error_code == "INVALID_SPREADSHEET"
