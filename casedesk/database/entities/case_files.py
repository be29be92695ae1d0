"""
CaseFile ORM Model
==================

Metadata for a file uploaded to a case. The bytes live in the blob store
(S3) under ``storage_key``; the row caches the text extracted from them.
"""

from casedesk.database.config.connection_engine import declarativeBase
from sqlalchemy import ForeignKey, DateTime, BigInteger, TEXT, VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
import uuid
from datetime import datetime


class CaseFile(declarativeBase):
    """
    ORM model for the `case_file` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    case_id : UUID | None
        Owning case, if any.
    uploaded_by : UUID
        User who uploaded the file.
    name : str
        Original filename.
    mime_type : str
        MIME type reported at upload.
    size : int
        Size of the stored bytes.
    storage_key : str
        Object key in the blob store.
    extracted_text : str | None
        Cached extraction result (already truncated).
    created_at : datetime
        Upload time.
    """

    __tablename__ = "case_file"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)

    case_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_case.id"), nullable=True, index=True)

    uploaded_by: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)

    name: Mapped[str] = mapped_column(VARCHAR(500), nullable=False)

    mime_type: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)

    size: Mapped[int] = mapped_column(BigInteger, nullable=False)

    storage_key: Mapped[str] = mapped_column(TEXT, nullable=False)

    extracted_text: Mapped[str] = mapped_column(TEXT, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __init__(self, case_id: UUID | None, uploaded_by: UUID, name: str, mime_type: str, size: int,
                 storage_key: str, created_at: datetime):
        self.id = uuid.uuid4()
        self.case_id = case_id
        self.uploaded_by = uploaded_by
        self.name = name
        self.mime_type = mime_type
        self.size = size
        self.storage_key = storage_key
        self.extracted_text = None
        self.created_at = created_at

    @property
    def has_extracted_text(self) -> bool:
        return bool(self.extracted_text and self.extracted_text.strip())

    def __str__(self) -> str:
        return f"CaseFile: id:{self.id}, name: {self.name}, type: {self.mime_type}, case: {self.case_id}"
