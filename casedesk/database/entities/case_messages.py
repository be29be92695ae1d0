"""
CaseMessage ORM Model
=====================

The ``CaseMessage`` ORM model represents a single entry of a case's chat
transcript, either the user's question or the assistant's answer.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Foreign key to ``app_case.id`` (``case_id``) and to the author (``author_id``)
- Timezone-aware ``timestamp`` used for transcript ordering
- ``is_ai`` distinguishes assistant answers from user questions

Messages are immutable once written; there is no update or delete path.
"""

from casedesk.database.config.connection_engine import declarativeBase
from sqlalchemy import ForeignKey, DateTime, Boolean, TEXT, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
from datetime import datetime


class CaseMessage(declarativeBase):
    """
    ORM model for the `case_message` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the message.
    case_id : UUID
        Case whose transcript the message belongs to.
    author_id : UUID
        User who sent the question (assistant answers carry the asking user).
    content : str
        Message text.
    timestamp : datetime
        When the message was recorded.
    is_ai : bool
        True for assistant answers.
    """

    __tablename__ = "case_message"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    """Primary key. UUID of the message."""

    case_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_case.id"), nullable=False, index=True)
    """Foreign key to the case this message belongs to."""

    author_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    """Foreign key to the user on whose behalf the message was written."""

    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Text content of the message (cannot be null)."""

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    """Timestamp when the message was recorded."""

    is_ai: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    """Whether the assistant authored the message."""

    def __init__(self, message_id: UUID, case_id: UUID, author_id: UUID, content: str, timestamp, is_ai: bool):
        """
        Initialize a new CaseMessage object.

        Parameters
        ----------
        message_id : UUID
            Unique identifier of the message.
        case_id : UUID
            ID of the case this message belongs to.
        author_id : UUID
            ID of the user who asked.
        content : str
            The content of the message.
        timestamp : datetime | str
            Creation time. Accepts datetime or ISO8601 string.
        is_ai : bool
            True for assistant answers.
        """
        self.id = message_id
        self.case_id = case_id
        self.author_id = author_id
        self.content = content
        self.is_ai = is_ai
        if isinstance(timestamp, str):
            self.timestamp = datetime.fromisoformat(timestamp)
        else:
            self.timestamp = timestamp

    def __str__(self) -> str:
        role = "assistant" if self.is_ai else "user"
        return f"Case: id:{self.case_id}, role: {role}, message: {self.content}, time_created: {self.timestamp}"
