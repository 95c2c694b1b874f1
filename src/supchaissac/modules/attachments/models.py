"""
Attachment Models

Supporting documents (attendance sheets, pupil lists...) uploaded for a
declared session. The file itself lives in object storage; the row keeps
its key and metadata.
"""

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from supchaissac.modules.shared import BaseModel


class Attachment(BaseModel):
    """A file bound to exactly one session. Only ``is_verified`` ever changes."""

    __tablename__ = "attachments"

    session_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_key: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    uploaded_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, session_id={self.session_id}, {self.original_name})>"

    @property
    def uploaded_at(self) -> datetime:
        return self.created_at
