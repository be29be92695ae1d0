"""
Case ORM Model
==============

The ``Case`` ORM model represents a named grouping of documents and chat
history owned by a single user. It maps to the ``app_case`` table.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``) and owner reference (``created_by`` → ``app_user.id``)
- Creation and last-modified timestamps (UTC, tz-aware)
- Soft delete through ``is_active``
- Aggregates ``document_count`` and ``total_size`` (UTF-8 bytes of attached
  document content), maintained incrementally on attach/detach

Invariants
~~~~~~~~~~
``document_count`` and ``total_size`` equal the count and size of the
documents whose ``case_id`` points at this case, and never exceed
``settings.CASE_MAX_DOCUMENTS`` / ``settings.CASE_MAX_TOTAL_BYTES``.
"""

from casedesk.database.config.connection_engine import declarativeBase
from sqlalchemy import ForeignKey, DateTime, Boolean, Integer, BigInteger, TEXT, VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
import uuid
from datetime import datetime


class Case(declarativeBase):
    """
    ORM model for the `app_case` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    name : str
        Display name of the case.
    description : str | None
        Optional free-text description, included in AI prompts.
    created_by : UUID
        Owner of the case. Only the owner may read or change it.
    created_at / last_modified_at : datetime
        Lifecycle timestamps.
    is_active : bool
        False once the case has been (soft) deleted.
    document_count : int
        Number of documents currently attached.
    total_size : int
        Sum of the UTF-8 byte sizes of attached document content.
    """

    __tablename__ = "app_case"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)

    description: Mapped[str] = mapped_column(TEXT, nullable=True)

    created_by: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    last_modified_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    document_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    def __init__(self, name: str, created_by: UUID, created_at: datetime, description: str | None = None):
        """
        Initialize a new, empty and active Case.

        Parameters
        ----------
        name : str
            Display name of the case.
        created_by : UUID
            ID of the owning user.
        created_at : datetime
            Creation timestamp; also used as the initial last-modified time.
        description : str | None
            Optional description.
        """
        self.id = uuid.uuid4()
        self.name = name
        self.description = description
        self.created_by = created_by
        self.created_at = created_at
        self.last_modified_at = created_at
        self.is_active = True
        self.document_count = 0
        self.total_size = 0

    def __str__(self) -> str:
        return f"Case: id:{self.id}, name: {self.name}, documents: {self.document_count}, size: {self.total_size}"
