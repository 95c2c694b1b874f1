"""
Student Schemas
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    last_name: str
    first_name: str
    birth_date: str | None = None
    usage_first_name: str | None = None
    gender: str | None = None
    class_name: str
    accompaniment_project: str | None = None
    school_year: str
    imported_by: str | None = None
    created_at: datetime


class StudentSummary(BaseModel):
    """Short form used by autocomplete and class lists."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    last_name: str
    first_name: str
    class_name: str


class MatchingClass(BaseModel):
    name: str
    count: int


class StudentSearchResponse(BaseModel):
    students: list[StudentSummary]
    matching_class: MatchingClass | None = None


class StudentStatsResponse(BaseModel):
    total_students: int
    total_classes: int
    class_counts: dict[str, int]
    project_counts: dict[str, int]
    school_year: str


class ImportErrorDetail(BaseModel):
    line: int
    reason: str


class StudentImportResponse(BaseModel):
    """
    Result of a roster import.

    ``errors`` is the number of rejected rows; ``error_details`` lists at
    most the first ten.
    """

    imported: int
    errors: int
    error_details: list[ImportErrorDetail]
    classes: list[str]
    school_year: str


class PreviewRow(BaseModel):
    last_name: str
    first_name: str
    class_name: str
    accompaniment_project: str


class StudentPreviewResponse(BaseModel):
    headers: list[str]
    mapping: dict[str, str]
    total_rows: int
    classes_found: list[str]
    projects_found: list[str]
    preview: list[PreviewRow]


class DeleteRosterResponse(BaseModel):
    deleted: int
    school_year: str
    message: str
