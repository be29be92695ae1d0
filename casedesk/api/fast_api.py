"""
FastAPI Router - Auth • Cases • Documents • Case Chat • Case Files
==================================================================

Purpose
-------
Defines the HTTP API for:
- Authentication: login, register, logout, current user
- Cases: create, list, get, update, soft delete
- Case documents: list, attach, detach
- Case chat: transcript and grounded AI answers
- Case files: upload, list, presigned URL, text extraction, document
  creation from a file, delete
- Documents: the caller's document library

Key Notes
---------
- Input validation via Pydantic models in `casedesk.api.models`.
- Auth cookie: `token` (JWT, subject = user id). `current_user_id` resolves it
  to a user id or None; reads answer empty for None, mutations return 401.
- Service-layer `CaseDeskError`s are translated into `HTTPException`s with the
  error's status code. Missing, deleted and foreign cases all answer 404.
- Handlers are plain `def` so blocking database, S3 and OpenAI calls run in
  the threadpool.
- Long-lived collaborators (reply generator, text extractor, blob store) are
  created by the app lifespan and reached through dependencies, so tests can
  override them.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Cookie, Depends, File, HTTPException, Request, Response, UploadFile

from casedesk.api.aws_bucket_funcs.funcs import BlobStore
from casedesk.api.llm_pipeline import CaseReplyGenerator
from casedesk.api.models import (
    CaseCreationDetails,
    CaseDetails,
    CaseDocumentLink,
    CaseFileDetails,
    CaseMessageDetails,
    CaseMessageRequest,
    CaseReply,
    CaseUpdateDetails,
    DocumentCreationDetails,
    DocumentDetails,
    DocumentUpdateDetails,
    ExtractedText,
    FileUrl,
    UserCredentials,
    UserData,
    UserOpenData,
)
from casedesk.api.text_extraction import TextExtractor
from casedesk.api.utils import create_access_token, verify_token
from casedesk.database.config.config import settings
from casedesk.database.core import case_funcs, document_funcs, file_funcs
from casedesk.database.core.case_messaging import get_case_messages, send_message_to_case_ai
from casedesk.database.core.exceptions import CaseDeskError, CaseNotFoundError
from casedesk.database.core.funcs import (
    check_create_user_instance,
    get_user_profile,
    is_current_token,
    login_user,
    update_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def current_user_id(token: Optional[str] = Cookie(None)) -> Optional[UUID]:
    """Resolve the `token` cookie to a user id, or None when unauthenticated."""
    user_id = verify_token(token)
    if user_id is None or not is_current_token(user_id=user_id, token=token):
        return None
    return user_id


def get_reply_generator(request: Request) -> CaseReplyGenerator:
    return request.app.state.reply_generator


def get_text_extractor(request: Request) -> TextExtractor:
    return request.app.state.text_extractor


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def http_error(error: CaseDeskError) -> HTTPException:
    """Translate a service-layer error into the matching HTTP response."""
    return HTTPException(status_code=error.status_code, detail=error.detail)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@router.post('/login')
def login(data: UserCredentials, response: Response):
    """Authenticate a user and set a signed JWT cookie.

    Request body:
        UserCredentials {username, password}

    Response:
        200: {'user_details': {...}}
        401: wrong username or password
    """
    try:
        user = login_user(username=data.username, password=data.password)
    except CaseDeskError as e:
        raise http_error(e)
    access_token = create_access_token(user.id)
    update_token(user_id=user.id, token=access_token)
    response.set_cookie(
        key="token",
        value=access_token,
        httponly=True,
        secure=False,  # True in production
        samesite="lax",
        max_age=int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60,
    )
    return {'user_details': user}


@router.post('/register', response_model=UserOpenData)
def register(data: UserData):
    """Register a new user account; 400 with the reason on failure."""
    try:
        return check_create_user_instance(username=data.username, password=data.password, email=data.email)
    except CaseDeskError as e:
        raise http_error(e)


@router.post('/logout')
def logout(response: Response, user_id: Optional[UUID] = Depends(current_user_id)):
    """Clear the auth cookie and forget the stored token."""
    if user_id is not None:
        update_token(user_id=user_id, token=None)
    response.delete_cookie(key="token", httponly=True, samesite="lax")
    return True


@router.get('/get_user', response_model=UserOpenData)
def get_user(user_id: Optional[UUID] = Depends(current_user_id)):
    """Return the current user's profile; 401 without a valid cookie."""
    if user_id is None:
        raise HTTPException(status_code=401, detail='Invalid or expired token')
    user = get_user_profile(user_id=user_id)
    if user is None:
        raise HTTPException(status_code=401, detail='Invalid or expired token')
    return user


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------

@router.post('/cases', response_model=CaseDetails)
def new_case(data: CaseCreationDetails, user_id: Optional[UUID] = Depends(current_user_id)):
    try:
        return case_funcs.create_case(user_id=user_id, name=data.name, description=data.description)
    except CaseDeskError as e:
        raise http_error(e)


@router.get('/cases', response_model=List[CaseDetails])
def list_cases(user_id: Optional[UUID] = Depends(current_user_id)):
    """Active cases of the caller, most recently modified first."""
    return case_funcs.get_user_cases(user_id=user_id)


@router.get('/cases/{case_id}', response_model=CaseDetails)
def read_case(case_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    case = case_funcs.get_case(user_id=user_id, case_id=case_id)
    if case is None:
        raise http_error(CaseNotFoundError())
    return case


@router.patch('/cases/{case_id}', response_model=CaseDetails)
def edit_case(case_id: UUID, data: CaseUpdateDetails, user_id: Optional[UUID] = Depends(current_user_id)):
    try:
        return case_funcs.update_case(user_id=user_id, case_id=case_id, name=data.name, description=data.description)
    except CaseDeskError as e:
        raise http_error(e)


@router.delete('/cases/{case_id}')
def remove_case(case_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    """Soft-delete a case; its documents are detached, not deleted."""
    try:
        return case_funcs.delete_case(user_id=user_id, case_id=case_id)
    except CaseDeskError as e:
        raise http_error(e)


@router.get('/cases/{case_id}/documents', response_model=List[DocumentDetails])
def list_case_documents(case_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    return case_funcs.get_case_documents(user_id=user_id, case_id=case_id)


@router.post('/cases/{case_id}/documents', response_model=CaseDetails)
def attach_case_document(case_id: UUID, data: CaseDocumentLink, user_id: Optional[UUID] = Depends(current_user_id)):
    """Attach a document; 409 when the case is full or the document is in another case."""
    try:
        return case_funcs.add_document_to_case(user_id=user_id, case_id=case_id, document_id=data.document_id)
    except CaseDeskError as e:
        raise http_error(e)


@router.delete('/cases/{case_id}/documents/{document_id}', response_model=CaseDetails)
def detach_case_document(case_id: UUID, document_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    try:
        return case_funcs.remove_document_from_case(user_id=user_id, case_id=case_id, document_id=document_id)
    except CaseDeskError as e:
        raise http_error(e)


# ---------------------------------------------------------------------------
# Case chat
# ---------------------------------------------------------------------------

@router.get('/cases/{case_id}/messages', response_model=List[CaseMessageDetails])
def list_case_messages(case_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    """Transcript in chronological order; [] for anyone but the owner."""
    return get_case_messages(user_id=user_id, case_id=case_id)


@router.post('/cases/{case_id}/messages', response_model=CaseReply)
def ask_case(
    case_id: UUID,
    data: CaseMessageRequest,
    user_id: Optional[UUID] = Depends(current_user_id),
    generator: CaseReplyGenerator = Depends(get_reply_generator),
):
    """Store the question, answer it from the case documents, store the answer.

    AI failures never surface as errors here: the stored and returned answer
    is then one of the generator's fixed messages.
    """
    try:
        return send_message_to_case_ai(user_id=user_id, case_id=case_id, content=data.content, generator=generator)
    except CaseDeskError as e:
        raise http_error(e)


# ---------------------------------------------------------------------------
# Case files
# ---------------------------------------------------------------------------

@router.get('/cases/{case_id}/files', response_model=List[CaseFileDetails])
def list_case_files(case_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    return file_funcs.get_case_files(user_id=user_id, case_id=case_id)


@router.post('/cases/{case_id}/files', response_model=CaseFileDetails)
def upload_case_file(
    case_id: UUID,
    file: UploadFile = File(...),
    user_id: Optional[UUID] = Depends(current_user_id),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Store an uploaded file for a case (multipart field `file`)."""
    # one byte past the limit is enough to reject oversized uploads
    data = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    try:
        return file_funcs.save_case_file(
            user_id=user_id,
            case_id=case_id,
            filename=file.filename,
            mime_type=file.content_type,
            data=data,
            blob_store=blob_store,
        )
    except CaseDeskError as e:
        raise http_error(e)


@router.get('/files/{file_id}/url', response_model=FileUrl)
def file_url(file_id: UUID, user_id: Optional[UUID] = Depends(current_user_id),
             blob_store: BlobStore = Depends(get_blob_store)):
    try:
        return file_funcs.get_file_url(user_id=user_id, file_id=file_id, blob_store=blob_store)
    except CaseDeskError as e:
        raise http_error(e)


@router.post('/files/{file_id}/extract', response_model=ExtractedText)
def extract_file_text(
    file_id: UUID,
    user_id: Optional[UUID] = Depends(current_user_id),
    blob_store: BlobStore = Depends(get_blob_store),
    extractor: TextExtractor = Depends(get_text_extractor),
):
    """Return the file's text, extracting and caching it on first use."""
    try:
        return file_funcs.ensure_extracted_text(user_id=user_id, file_id=file_id, blob_store=blob_store,
                                                extractor=extractor)
    except CaseDeskError as e:
        raise http_error(e)


@router.post('/files/{file_id}/document', response_model=DocumentDetails)
def document_from_file(
    file_id: UUID,
    user_id: Optional[UUID] = Depends(current_user_id),
    blob_store: BlobStore = Depends(get_blob_store),
    extractor: TextExtractor = Depends(get_text_extractor),
):
    """Create a document from the file's text; 422 when nothing readable was found."""
    try:
        return file_funcs.create_document_from_file(user_id=user_id, file_id=file_id, blob_store=blob_store,
                                                    extractor=extractor)
    except CaseDeskError as e:
        raise http_error(e)


@router.delete('/files/{file_id}')
def remove_file(file_id: UUID, user_id: Optional[UUID] = Depends(current_user_id),
                blob_store: BlobStore = Depends(get_blob_store)):
    try:
        return file_funcs.delete_case_file(user_id=user_id, file_id=file_id, blob_store=blob_store)
    except CaseDeskError as e:
        raise http_error(e)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@router.post('/documents', response_model=DocumentDetails)
def new_document(data: DocumentCreationDetails, user_id: Optional[UUID] = Depends(current_user_id)):
    try:
        return document_funcs.create_document(user_id=user_id, title=data.title, content=data.content)
    except CaseDeskError as e:
        raise http_error(e)


@router.get('/documents', response_model=List[DocumentDetails])
def list_documents(user_id: Optional[UUID] = Depends(current_user_id)):
    return document_funcs.get_user_documents(user_id=user_id)


@router.get('/documents/{document_id}', response_model=DocumentDetails)
def read_document(document_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    document = document_funcs.get_document(user_id=user_id, document_id=document_id)
    if document is None:
        raise HTTPException(status_code=404, detail='Document not found')
    return document


@router.patch('/documents/{document_id}', response_model=DocumentDetails)
def edit_document(document_id: UUID, data: DocumentUpdateDetails,
                  user_id: Optional[UUID] = Depends(current_user_id)):
    try:
        return document_funcs.update_document(user_id=user_id, document_id=document_id, title=data.title,
                                              content=data.content)
    except CaseDeskError as e:
        raise http_error(e)


@router.delete('/documents/{document_id}')
def remove_document(document_id: UUID, user_id: Optional[UUID] = Depends(current_user_id)):
    try:
        return document_funcs.delete_document(user_id=user_id, document_id=document_id)
    except CaseDeskError as e:
        raise http_error(e)
