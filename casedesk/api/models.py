"""
Pydantic models used for request/response validation and API data contracts.

Each operation has its own named request and response type; the service layer
returns these models (never live ORM rows) so results stay valid after the
transaction's session is closed.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class OrmModel(BaseModel):
    """Base for response models built from ORM rows via ``model_validate``."""

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class UserCredentials(BaseModel):
    """
    Represents login credentials for a user.
    """
    username: str
    """The username of the user"""
    password: str
    """The plaintext password provided for authentication."""


class UserData(BaseModel):
    """
    Represents data required to register a new user.
    """
    username: str = Field(..., min_length=1, max_length=255)
    """Desired username."""
    password: str
    """Password chosen by the user."""
    email: str = Field(..., min_length=3, max_length=255)
    """Email address of the user."""


class UserOpenData(OrmModel):
    """
    Publicly shareable user data (non-sensitive).
    """
    id: UUID
    username: str = Field(..., validation_alias="user_name")
    email: str


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------

class CaseCreationDetails(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Smith v. Jones"])
    description: Optional[str] = Field(None, description="Free-text description included in AI prompts.")


class CaseUpdateDetails(BaseModel):
    """Only the supplied fields are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class CaseDetails(OrmModel):
    id: UUID
    name: str
    description: Optional[str] = None
    created_by: UUID
    created_at: datetime
    last_modified_at: datetime
    is_active: bool
    document_count: int
    total_size: int


class CaseDocumentLink(BaseModel):
    """Body of the attach operation."""
    document_id: UUID


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class DocumentCreationDetails(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = ""


class DocumentUpdateDetails(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = None


class DocumentDetails(OrmModel):
    id: UUID
    title: str
    content: str
    case_id: Optional[UUID] = None
    created_by: UUID
    created_at: datetime
    last_modified_at: datetime


# ---------------------------------------------------------------------------
# Case chat
# ---------------------------------------------------------------------------

class CaseMessageRequest(BaseModel):
    """A question asked of a case."""
    content: str = Field(..., min_length=1, description="The user's question.")


class CaseMessageDetails(OrmModel):
    id: UUID
    case_id: UUID
    author_id: UUID
    content: str
    timestamp: datetime
    is_ai: bool


class CaseReply(BaseModel):
    """
    Result of one send operation: both persisted message ids and the answer
    text that was stored for the assistant.
    """
    user_message_id: UUID
    ai_message_id: UUID
    ai_response: str


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

class CaseFileDetails(OrmModel):
    """Metadata for an uploaded/stored file."""
    id: UUID
    case_id: Optional[UUID] = None
    name: str = Field(..., description="Original filename as provided by the client.", examples=["report.pdf"])
    mime_type: str = Field(..., description="MIME type of the file.", examples=["application/pdf"])
    size: int
    created_at: datetime
    has_extracted_text: bool = False


class FileUrl(BaseModel):
    url: str = Field(..., description="Presigned URL granting temporary read access.")


class ExtractedText(BaseModel):
    file_id: UUID
    text: Optional[str] = None
