"""
Service-layer operations for the caller's document library.

Documents exist independently of cases. When an attached document's content
changes, the owning case's ``total_size`` follows the byte delta so the case
aggregates keep matching its documents.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from casedesk.api.models import DocumentDetails
from casedesk.database.config.config import settings
from casedesk.database.core.case_funcs import detach_document, require_user
from casedesk.database.core.exceptions import CaseLimitError, DocumentNotFoundError
from casedesk.database.daos.case_dao import CaseDao
from casedesk.database.daos.document_dao import DocumentDao
from casedesk.database.entities.documents import Document
from casedesk.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def _fetch_owned_document(session: Session, document_id: uuid.UUID, user_id: uuid.UUID) -> Document:
    document = DocumentDao().fetchDocumentForOwner(session, document_id, user_id, for_update=True)
    if document is None:
        raise DocumentNotFoundError()
    return document


@transactional
def create_document(session: Session, user_id: uuid.UUID | None, title: str, content: str = "") -> DocumentDetails:
    """
    Create an unattached document owned by the caller.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    user_id : UUID | None
        Caller identity.
    title : str
        Document title.
    content : str
        Plain-text body.
    """
    owner = require_user(user_id)
    document = Document(title=title, content=content, created_by=owner, created_at=datetime.now(timezone.utc))
    DocumentDao().createDocument(session, document)
    session.flush()
    return DocumentDetails.model_validate(document)


@transactional
def get_user_documents(session: Session, user_id: uuid.UUID | None) -> list[DocumentDetails]:
    if user_id is None:
        return []
    return [DocumentDetails.model_validate(doc) for doc in DocumentDao().fetchDocumentsByUser(session, user_id)]


@transactional
def get_document(session: Session, user_id: uuid.UUID | None, document_id: uuid.UUID) -> DocumentDetails | None:
    if user_id is None:
        return None
    document = DocumentDao().fetchDocumentForOwner(session, document_id, user_id)
    return DocumentDetails.model_validate(document) if document else None


@transactional
def update_document(session: Session, user_id: uuid.UUID | None, document_id: uuid.UUID,
                    title: str | None = None, content: str | None = None) -> DocumentDetails:
    """
    Change a document's title and/or content and bump ``last_modified_at``.

    Raises
    ------
    DocumentNotFoundError
        Missing or foreign document.
    CaseLimitError
        The new content would push the owning case over its size cap.
    """
    owner = require_user(user_id)
    document = _fetch_owned_document(session, document_id, owner)
    now = datetime.now(timezone.utc)

    if content is not None and content != document.content:
        delta = len(content.encode("utf-8")) - document.size
        if document.case_id is not None:
            case = CaseDao().fetchCaseForUpdate(session, document.case_id, owner)
            if case is not None:
                if delta > 0 and case.total_size + delta > settings.CASE_MAX_TOTAL_BYTES:
                    raise CaseLimitError("Case size limit reached")
                case.total_size = max(0, case.total_size + delta)
                case.last_modified_at = now
        document.content = content

    if title is not None:
        document.title = title
    document.last_modified_at = now
    return DocumentDetails.model_validate(document)


@transactional
def delete_document(session: Session, user_id: uuid.UUID | None, document_id: uuid.UUID) -> bool:
    """Delete a document, detaching it from its case first."""
    owner = require_user(user_id)
    document = _fetch_owned_document(session, document_id, owner)
    if document.case_id is not None:
        case = CaseDao().fetchCaseForUpdate(session, document.case_id, owner)
        if case is not None:
            detach_document(case, document, datetime.now(timezone.utc))
        else:
            document.case_id = None
    DocumentDao().deleteDocument(session, document)
    logger.info("Deleted document %s", document_id)
    return True
