"""
Service-layer operations for cases and their document membership.

Every function runs under `@transactional`; the attach/detach paths lock the
case row first so the ``document_count`` / ``total_size`` aggregates are
updated from a consistent read.

Authorization
-------------
A case that does not exist, has been deleted, or belongs to another user is
reported the same way (`CaseNotFoundError`) so callers cannot probe for other
users' cases. Read operations return empty results for anonymous callers;
mutations raise `NotAuthenticatedError`.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from casedesk.api.models import CaseDetails, DocumentDetails
from casedesk.database.config.config import settings
from casedesk.database.core.exceptions import (
    CaseLimitError,
    CaseNotFoundError,
    DocumentAlreadyAttachedError,
    DocumentNotFoundError,
    DocumentNotInCaseError,
    NotAuthenticatedError,
)
from casedesk.database.daos.case_dao import CaseDao
from casedesk.database.daos.document_dao import DocumentDao
from casedesk.database.entities.cases import Case
from casedesk.database.entities.documents import Document
from casedesk.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def require_user(user_id: uuid.UUID | None) -> uuid.UUID:
    """Return ``user_id`` or raise `NotAuthenticatedError` for anonymous callers."""
    if user_id is None:
        raise NotAuthenticatedError()
    return user_id


def fetch_owned_case(session: Session, case_id: uuid.UUID, user_id: uuid.UUID, lock: bool = False) -> Case:
    """Load an active case owned by ``user_id`` or raise `CaseNotFoundError`."""
    case_dao = CaseDao()
    if lock:
        case = case_dao.fetchCaseForUpdate(session, case_id, user_id)
    else:
        case = case_dao.fetchActiveCaseForOwner(session, case_id, user_id)
    if case is None:
        raise CaseNotFoundError()
    return case


def attach_document(case: Case, document: Document, now: datetime) -> None:
    """
    Link ``document`` to ``case`` and grow the aggregates, enforcing the limits.

    Re-attaching a document already in ``case`` changes nothing. The case row
    must already be locked by the caller.

    Raises
    ------
    DocumentAlreadyAttachedError
        The document belongs to a different case.
    CaseLimitError
        The case is full by count or the document would exceed the size cap.
    """
    if document.case_id == case.id:
        return
    if document.case_id is not None:
        raise DocumentAlreadyAttachedError()

    size = document.size
    if case.document_count >= settings.CASE_MAX_DOCUMENTS:
        raise CaseLimitError("Case document limit reached")
    if case.total_size + size > settings.CASE_MAX_TOTAL_BYTES:
        raise CaseLimitError("Case size limit reached")

    document.case_id = case.id
    case.document_count += 1
    case.total_size += size
    case.last_modified_at = now


def detach_document(case: Case, document: Document, now: datetime) -> None:
    """Unlink ``document`` from ``case``; aggregates never drop below zero."""
    size = document.size
    document.case_id = None
    case.document_count = max(0, case.document_count - 1)
    case.total_size = max(0, case.total_size - size)
    case.last_modified_at = now


@transactional
def create_case(session: Session, user_id: uuid.UUID | None, name: str, description: str | None = None) -> CaseDetails:
    """
    Create an empty, active case owned by the caller.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    user_id : UUID | None
        Caller identity.
    name : str
        Display name.
    description : str | None
        Optional description.

    Returns
    -------
    CaseDetails
        The new case with zeroed aggregates.
    """
    owner = require_user(user_id)
    case = Case(name=name, created_by=owner, created_at=datetime.now(timezone.utc), description=description)
    CaseDao().createCase(session, case)
    session.flush()
    logger.info("Created case %s for user %s", case.id, owner)
    return CaseDetails.model_validate(case)


@transactional
def get_user_cases(session: Session, user_id: uuid.UUID | None) -> list[CaseDetails]:
    """Active cases of the caller, most recently modified first; [] when anonymous."""
    if user_id is None:
        return []
    return [CaseDetails.model_validate(case) for case in CaseDao().fetchCasesByUser(session, user_id)]


@transactional
def get_case(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID) -> CaseDetails | None:
    """The case if the caller owns it and it is active, otherwise None."""
    if user_id is None:
        return None
    case = CaseDao().fetchActiveCaseForOwner(session, case_id, user_id)
    return CaseDetails.model_validate(case) if case else None


@transactional
def update_case(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID,
                name: str | None = None, description: str | None = None) -> CaseDetails:
    """Change the supplied fields only and bump ``last_modified_at``."""
    case = fetch_owned_case(session, case_id, require_user(user_id))
    if name is not None:
        case.name = name
    if description is not None:
        case.description = description
    case.last_modified_at = datetime.now(timezone.utc)
    return CaseDetails.model_validate(case)


@transactional
def delete_case(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID) -> bool:
    """
    Soft-delete a case.

    Every attached document is detached (not deleted), the aggregates are reset
    to zero and ``is_active`` is cleared.
    """
    case = fetch_owned_case(session, case_id, require_user(user_id), lock=True)
    documents = DocumentDao().fetchDocumentsByCase(session, case.id)
    for document in documents:
        document.case_id = None
    case.document_count = 0
    case.total_size = 0
    case.is_active = False
    case.last_modified_at = datetime.now(timezone.utc)
    logger.info("Deleted case %s, detached %d documents", case.id, len(documents))
    return True


@transactional
def get_case_documents(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID) -> list[DocumentDetails]:
    """Documents currently in the case, newest edit first; [] for anyone but the owner."""
    if user_id is None:
        return []
    case = CaseDao().fetchActiveCaseForOwner(session, case_id, user_id)
    if case is None:
        return []
    return [DocumentDetails.model_validate(doc) for doc in DocumentDao().fetchDocumentsByCase(session, case.id)]


@transactional
def add_document_to_case(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID,
                         document_id: uuid.UUID) -> CaseDetails:
    """
    Attach one of the caller's documents to one of the caller's cases.

    Returns
    -------
    CaseDetails
        The case with its updated aggregates.

    Raises
    ------
    CaseNotFoundError, DocumentNotFoundError, DocumentAlreadyAttachedError, CaseLimitError
    """
    owner = require_user(user_id)
    case = fetch_owned_case(session, case_id, owner, lock=True)
    document = DocumentDao().fetchDocumentForOwner(session, document_id, owner, for_update=True)
    if document is None:
        raise DocumentNotFoundError()
    attach_document(case, document, datetime.now(timezone.utc))
    return CaseDetails.model_validate(case)


@transactional
def remove_document_from_case(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID,
                              document_id: uuid.UUID) -> CaseDetails:
    """Detach a document that is currently in the case."""
    owner = require_user(user_id)
    case = fetch_owned_case(session, case_id, owner, lock=True)
    document = DocumentDao().fetchDocumentForOwner(session, document_id, owner, for_update=True)
    if document is None or document.case_id != case.id:
        raise DocumentNotInCaseError()
    detach_document(case, document, datetime.now(timezone.utc))
    return CaseDetails.model_validate(case)
