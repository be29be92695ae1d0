"""
Entities Package - SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes form the persistence backbone and are consumed by DAOs
(`daos` package).

Tech Stack & Conventions
------------------------
- Portable `Uuid` primary keys (native UUID on PostgreSQL)
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`

Contents
--------
- User
    Registered user; credentials for the cookie-based JWT login.

- Case
    Owner-scoped grouping of documents and chat history.
    * Aggregates `document_count` / `total_size` maintained on attach/detach
    * Soft delete through `is_active`

- Document
    Titled text owned by a user, optionally attached to one case (`case_id`).

- CaseMessage
    One entry of a case transcript; `is_ai` separates questions from answers.

- CaseFile
    Uploaded file metadata, blob-store key and cached extracted text.

Importing this package registers every table on the shared metadata.
"""

from casedesk.database.entities.user import User
from casedesk.database.entities.cases import Case
from casedesk.database.entities.documents import Document
from casedesk.database.entities.case_messages import CaseMessage
from casedesk.database.entities.case_files import CaseFile

__all__ = ["User", "Case", "Document", "CaseMessage", "CaseFile"]
