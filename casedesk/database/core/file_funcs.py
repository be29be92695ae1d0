"""
Service-layer operations for case files and their extracted text.

File bytes live in the blob store; the ``case_file`` row keeps the metadata,
the storage key and the cached extraction result. Blob-store calls and text
extraction (which may call the OpenAI API) run outside of any open database
transaction; only the short metadata reads and writes are `@transactional`.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from casedesk.api.aws_bucket_funcs.funcs import BlobStore, build_storage_key
from casedesk.api.models import CaseFileDetails, DocumentDetails, ExtractedText, FileUrl
from casedesk.api.text_extraction import TextExtractor
from casedesk.database.config.config import settings
from casedesk.database.core.case_funcs import attach_document, fetch_owned_case, require_user
from casedesk.database.core.exceptions import ExtractionFailedError, InvalidUploadError, StoredFileNotFoundError
from casedesk.database.daos.case_dao import CaseDao
from casedesk.database.daos.case_file_dao import CaseFileDao
from casedesk.database.daos.document_dao import DocumentDao
from casedesk.database.entities.case_files import CaseFile
from casedesk.database.entities.documents import Document
from casedesk.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFileRef:
    """Detached snapshot of the columns needed to read a file's bytes."""
    id: uuid.UUID
    case_id: Optional[uuid.UUID]
    name: str
    mime_type: str
    storage_key: str
    extracted_text: Optional[str]


def _fetch_owned_file(session: Session, user_id: uuid.UUID, file_id: uuid.UUID) -> CaseFile:
    case_file = CaseFileDao().fetchFileForUser(session, file_id, user_id)
    if case_file is None:
        raise StoredFileNotFoundError()
    return case_file


@transactional
def _assert_case_owner(session: Session, user_id: uuid.UUID, case_id: uuid.UUID) -> None:
    fetch_owned_case(session, case_id, user_id)


@transactional
def _record_case_file(session: Session, user_id: uuid.UUID, case_id: uuid.UUID, name: str, mime_type: str,
                      size: int, storage_key: str) -> CaseFileDetails:
    fetch_owned_case(session, case_id, user_id)
    case_file = CaseFile(
        case_id=case_id,
        uploaded_by=user_id,
        name=name,
        mime_type=mime_type,
        size=size,
        storage_key=storage_key,
        created_at=datetime.now(timezone.utc),
    )
    CaseFileDao().createFile(session, case_file)
    session.flush()
    return CaseFileDetails.model_validate(case_file)


def save_case_file(user_id: uuid.UUID | None, case_id: uuid.UUID, filename: str, mime_type: str | None,
                   data: bytes, blob_store: BlobStore) -> CaseFileDetails:
    """
    Store an uploaded file for a case.

    Parameters
    ----------
    user_id : UUID | None
        Caller identity; must own the case.
    case_id : UUID
        Target case.
    filename : str
        Original filename.
    mime_type : str | None
        MIME type reported by the client.
    data : bytes
        File content.
    blob_store : BlobStore
        Destination of the bytes.

    Raises
    ------
    InvalidUploadError
        Empty file, or larger than ``settings.MAX_UPLOAD_BYTES``.
    CaseNotFoundError
        The caller does not own an active case with this id.
    """
    owner = require_user(user_id)
    if not data:
        raise InvalidUploadError("Uploaded file is empty")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise InvalidUploadError(f"File exceeds the {settings.MAX_UPLOAD_BYTES} byte upload limit")

    _assert_case_owner(user_id=owner, case_id=case_id)
    name = filename or "file"
    content_type = mime_type or "application/octet-stream"
    key = build_storage_key(case_id, name)
    blob_store.put_bytes(key, data, content_type, name)
    try:
        return _record_case_file(user_id=owner, case_id=case_id, name=name, mime_type=content_type,
                                 size=len(data), storage_key=key)
    except Exception:
        blob_store.delete(key)
        raise


@transactional
def get_case_files(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID) -> list[CaseFileDetails]:
    """Files of a case, newest first; [] for anyone but the owner."""
    if user_id is None:
        return []
    if CaseDao().fetchActiveCaseForOwner(session, case_id, user_id) is None:
        return []
    return [CaseFileDetails.model_validate(f) for f in CaseFileDao().fetchFilesByCase(session, case_id)]


@transactional
def _remove_case_file_record(session: Session, user_id: uuid.UUID, file_id: uuid.UUID) -> str:
    case_file = _fetch_owned_file(session, user_id, file_id)
    storage_key = case_file.storage_key
    CaseFileDao().deleteFile(session, case_file)
    return storage_key


def delete_case_file(user_id: uuid.UUID | None, file_id: uuid.UUID, blob_store: BlobStore) -> bool:
    """
    Remove the metadata row, then the stored bytes.

    The blob is deleted only after the row deletion has committed. A blob-store
    failure at that point is logged and leaves an unreferenced object behind.
    """
    storage_key = _remove_case_file_record(user_id=require_user(user_id), file_id=file_id)
    try:
        blob_store.delete(storage_key)
    except Exception:
        logger.exception("Could not delete blob %s of removed file %s", storage_key, file_id)
    return True


@transactional
def get_file_url(session: Session, user_id: uuid.UUID | None, file_id: uuid.UUID,
                 blob_store: BlobStore) -> FileUrl:
    case_file = _fetch_owned_file(session, require_user(user_id), file_id)
    return FileUrl(url=blob_store.presigned_url(case_file.storage_key))


@transactional
def _load_file_ref(session: Session, user_id: uuid.UUID, file_id: uuid.UUID) -> StoredFileRef:
    case_file = _fetch_owned_file(session, user_id, file_id)
    return StoredFileRef(
        id=case_file.id,
        case_id=case_file.case_id,
        name=case_file.name,
        mime_type=case_file.mime_type,
        storage_key=case_file.storage_key,
        extracted_text=case_file.extracted_text,
    )


@transactional
def _cache_extracted_text(session: Session, user_id: uuid.UUID, file_id: uuid.UUID, text: str | None) -> None:
    case_file = _fetch_owned_file(session, user_id, file_id)
    case_file.extracted_text = text


def ensure_extracted_text(user_id: uuid.UUID | None, file_id: uuid.UUID, blob_store: BlobStore,
                          extractor: TextExtractor) -> ExtractedText:
    """
    Return the file's text, extracting and caching it on first use.

    A non-blank cached value is returned as is. Otherwise the bytes are read
    from the blob store, run through the extractor, truncated to
    ``settings.EXTRACTED_TEXT_MAX_CHARS`` and cached. ``text`` is None when
    nothing readable could be extracted.
    """
    owner = require_user(user_id)
    ref = _load_file_ref(user_id=owner, file_id=file_id)
    if ref.extracted_text and ref.extracted_text.strip():
        return ExtractedText(file_id=ref.id, text=ref.extracted_text)

    data = blob_store.get_bytes(ref.storage_key)
    extracted = extractor.extract(data, ref.mime_type, ref.name)
    text = extracted[: settings.EXTRACTED_TEXT_MAX_CHARS] if extracted else None
    _cache_extracted_text(user_id=owner, file_id=file_id, text=text)
    if text is None:
        logger.info("No readable text in file %s", file_id)
    return ExtractedText(file_id=ref.id, text=text)


@transactional
def _create_document_for_file(session: Session, user_id: uuid.UUID, file_id: uuid.UUID,
                              text: str) -> DocumentDetails:
    case_file = _fetch_owned_file(session, user_id, file_id)
    now = datetime.now(timezone.utc)
    document = Document(title=case_file.name, content=text, created_by=user_id, created_at=now)
    DocumentDao().createDocument(session, document)
    if case_file.case_id is not None:
        case = fetch_owned_case(session, case_file.case_id, user_id, lock=True)
        attach_document(case, document, now)
    session.flush()
    return DocumentDetails.model_validate(document)


def create_document_from_file(user_id: uuid.UUID | None, file_id: uuid.UUID, blob_store: BlobStore,
                              extractor: TextExtractor) -> DocumentDetails:
    """
    Create a document from a file's extracted text, titled with the file name.

    When the file belongs to a case the new document is attached to it in the
    same transaction, so a full case rejects the whole operation.

    Raises
    ------
    ExtractionFailedError
        The file has no readable text.
    CaseLimitError
        Attaching would exceed the case limits.
    """
    owner = require_user(user_id)
    extracted = ensure_extracted_text(user_id=owner, file_id=file_id, blob_store=blob_store, extractor=extractor)
    if not extracted.text:
        raise ExtractionFailedError()
    return _create_document_for_file(user_id=owner, file_id=file_id, text=extracted.text)
