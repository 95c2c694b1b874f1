"""
Teacher Directory Schemas
"""

from pydantic import BaseModel


class TeacherEntry(BaseModel):
    """A teacher as shown in pickers: ``display_name`` is "M. DUPONT Jean"."""

    id: int
    first_name: str
    last_name: str
    civility: str
    subject: str
    display_name: str
