"""
FastAPI application bootstrap with: \n
- Lifespan-managed construction of the long-lived collaborators \n
  (chat model, case reply generator, text extractor, S3 blob store) \n
- Root logging configured from settings \n
- CORS configured for the frontend \n

Environment contract (from `settings`): \n
- API_KEY: OpenAI key; without it AI answers degrade to a fixed message. \n
- FRONTEND_URL: allowed CORS origin. \n
- LOG_LEVEL: root logging level. \n
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import OpenAI

from casedesk.api.aws_bucket_funcs.funcs import BlobStore
from casedesk.api.fast_api import router
from casedesk.api.llm_pipeline import CaseReplyGenerator, ContextAssembler, build_completion_model
from casedesk.api.text_extraction import TextExtractor
from casedesk.database.config.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("uvicorn")
"""Logger instance for capturing and emitting Uvicorn server logs."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    Notes
    ------------
    - On startup (before yielding): builds the answer model and the vision
      model once (None without an API key). The answer model goes to the
      `CaseReplyGenerator`; the vision model and an OpenAI client go to the
      `TextExtractor`. The `BlobStore` is created alongside; all of them live
      on `app.state`.
    - On shutdown (after yielding): drops the references.
    """
    completion_model = build_completion_model()
    vision_model = build_completion_model(settings.VISION_MODEL, settings.EXTRACTION_MAX_OUTPUT_TOKENS)
    openai_client = None
    if settings.API_KEY:
        openai_client = OpenAI(api_key=settings.API_KEY, base_url=settings.OPENAI_BASE_URL)

    app.state.completion_model = completion_model
    app.state.reply_generator = CaseReplyGenerator(completion_model, ContextAssembler.from_settings())
    app.state.text_extractor = TextExtractor(
        chat_model=vision_model,
        openai_client=openai_client,
        transcription_model=settings.TRANSCRIPTION_MODEL,
    )
    app.state.blob_store = BlobStore(settings.BUCKET_NAME)
    logger.info("Case AI %s", "configured" if completion_model is not None else "not configured")

    try:
        yield
    finally:
        app.state.reply_generator = None
        app.state.text_extractor = None
        logger.info("App shutting down.")


# Instantiate the FastAPI app with lifespan handler
app = FastAPI(title="casedesk", lifespan=lifespan)
"""The FastAPI application object. The lifespan handler wires the collaborators
that route handlers reach through `casedesk.api.fast_api` dependencies."""

# -----------------------
# CORS configuration
# -----------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],      # Frontend origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# API routes
# -----------------------
app.include_router(router)
