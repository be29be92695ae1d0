"""
Document ORM Model
==================

A ``Document`` is a titled piece of text owned by a user. It can exist on its
own or be attached to at most one case via ``case_id``; the case keeps only a
back-reference, it does not own the document.
"""

from casedesk.database.config.connection_engine import declarativeBase
from sqlalchemy import ForeignKey, DateTime, TEXT, VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
import uuid
from datetime import datetime


class Document(declarativeBase):
    """
    ORM model for the `document` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    title : str
        Title shown to the user and cited by the AI.
    content : str
        Plain-text body.
    case_id : UUID | None
        Case the document is attached to, if any.
    created_by : UUID
        Owner of the document.
    created_at / last_modified_at : datetime
        Lifecycle timestamps. ``last_modified_at`` drives the recency ordering
        of AI context.
    """

    __tablename__ = "document"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    title: Mapped[str] = mapped_column(VARCHAR(500), nullable=False)

    content: Mapped[str] = mapped_column(TEXT, nullable=False, default="")

    case_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_case.id"), nullable=True, index=True)

    created_by: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    last_modified_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(self, title: str, content: str, created_by: UUID, created_at: datetime):
        self.id = uuid.uuid4()
        self.title = title
        self.content = content or ""
        self.case_id = None
        self.created_by = created_by
        self.created_at = created_at
        self.last_modified_at = created_at

    @property
    def size(self) -> int:
        """Size of the content in UTF-8 bytes, the unit of a case's ``total_size``."""
        return len((self.content or "").encode("utf-8"))

    def __str__(self) -> str:
        return f"Document: id:{self.id}, title: {self.title}, case: {self.case_id}"
