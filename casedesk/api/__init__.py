"""
API Package - FastAPI Router • Models • JWT Utils • Case AI • Extraction • S3
=============================================================================

Mission
-------
This package defines the backend's HTTP interface and its support stack:
FastAPI routing, JWT cookie auth, the grounded case-answer pipeline, file
text extraction and S3 storage of uploaded files.

Contents
--------
- fast_api
    FastAPI router with endpoints for:
      • Auth: login, register, logout, current user
      • Cases: CRUD (soft delete), document attach/detach
      • Case chat: transcript and AI answers
      • Case files: upload, list, URL, extract, to-document, delete
      • Documents: the caller's library
    Plus the dependencies `current_user_id`, `get_reply_generator`,
    `get_text_extractor` and `get_blob_store`.

- models
    Pydantic request/response contracts, one named type per operation.

- utils
    JWT helpers:
      • create_access_token(user_id) - issues signed JWTs with exp
      • verify_token(token) - validates JWTs and returns the user id

- llm_pipeline
    Case AI:
      • ContextAssembler - recency-ordered, budgeted context packing
      • CaseReplyGenerator - grounded prompts; every failure becomes a fixed message
      • build_completion_model - the `ChatOpenAI` client built at startup

- text_extraction
    `ContentCategory` classification and the `TextExtractor` (PDF, Word,
    plain text, HTML, images via the vision model, audio via transcription).

- aws_bucket_funcs
    `BlobStore` over one S3 bucket: put/get/delete bytes and presigned URLs.

Operational Notes
-----------------
- Security: Auth via HttpOnly `token` cookie (JWT). Never log secrets.
- Handlers are synchronous; FastAPI runs them in its threadpool.
"""
