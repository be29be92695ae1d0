"""
File-to-Text Extraction
=======================

Turns uploaded bytes into plain text for display and AI context.

The MIME type (and, when it is missing or generic, the filename extension)
selects a `ContentCategory`; each category has exactly one handler:

===============  =====================================================
Category         Strategy
===============  =====================================================
PDF              ``pypdf.PdfReader`` page text
WORD             ``python-docx`` paragraph text
PLAIN_TEXT       UTF-8 decode (errors ignored)
HTML             chat model → markdown; BeautifulSoup text without one
IMAGE            vision chat model on a base64 data URL
AUDIO            OpenAI transcription API
UNSUPPORTED      no handler, yields None
===============  =====================================================

Every handler failure is logged and reported as ``None``; blank results are
``None`` too. Callers treat ``None`` as "could not extract readable content".
"""

import base64
import enum
import io
import logging
import os
from typing import Callable, Dict, Optional

from bs4 import BeautifulSoup, Comment
from docx import Document as DocxDocument
from langchain_core.messages import HumanMessage, SystemMessage
from pypdf import PdfReader

from casedesk.api.llm_pipeline import lc_text_from_content

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {"image/png", "image/jpeg", "image/webp", "image/gif"}

EXTENSION_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".html": "text/html",
    ".htm": "text/html",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
    ".webm": "audio/webm",
}

IMAGE_SYSTEM_PROMPT = (
    "You convert images into detailed text transcripts. "
    "If the image contains a document, transcribe it accurately."
)
HTML_SYSTEM_PROMPT = "You transform content into markdown."
HTML_USER_PROMPT = "Extract the text and output it cleanly in markdown."


class ContentCategory(enum.Enum):
    PDF = "pdf"
    WORD = "word"
    PLAIN_TEXT = "plain_text"
    HTML = "html"
    IMAGE = "image"
    AUDIO = "audio"
    UNSUPPORTED = "unsupported"


def guess_ext(filename: str) -> str:
    """Lowercased extension of ``filename`` (e.g. ".pdf"), "" when there is none."""
    _, ext = os.path.splitext(filename or "")
    return ext.lower()


def normalize_mime(mime_type: Optional[str], filename: str = "") -> str:
    """
    Lowercase the MIME type, drop parameters after ';', map image/jpg to
    image/jpeg, and fall back to the filename extension when the type is
    missing or ``application/octet-stream``.
    """
    core = (mime_type or "").split(";")[0].strip().lower()
    if core == "image/jpg":
        core = "image/jpeg"
    if not core or core == "application/octet-stream":
        core = EXTENSION_MIME_TYPES.get(guess_ext(filename), core)
    return core


def classify_content(mime_type: Optional[str], filename: str = "") -> ContentCategory:
    """Map a MIME type (plus filename) to the category whose handler extracts it."""
    mime = normalize_mime(mime_type, filename)
    if mime in IMAGE_MIME_TYPES:
        return ContentCategory.IMAGE
    if mime.startswith("audio/"):
        return ContentCategory.AUDIO
    if "pdf" in mime:
        return ContentCategory.PDF
    if "word" in mime or "officedocument.wordprocessing" in mime:
        return ContentCategory.WORD
    if "html" in mime:
        return ContentCategory.HTML
    if mime.startswith("text/"):
        return ContentCategory.PLAIN_TEXT
    return ContentCategory.UNSUPPORTED


def to_data_url(data: bytes, mime: str) -> str:
    """Base64 data URL (data:{mime};base64,...) for inline image input."""
    b64 = base64.b64encode(data).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def strip_html(markup: str) -> str:
    """Visible text of an HTML page: scripts, styles and comments removed, one block per line."""
    soup = BeautifulSoup(markup, "html.parser")
    for element in soup(["script", "style", "noscript", "template"]):
        element.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return soup.get_text(separator="\n", strip=True)


class TextExtractor:
    """
    Best-effort text extraction from raw file bytes.

    Parameters
    ----------
    chat_model : BaseChatModel | None
        Vision-capable chat model for images and HTML. Without one, images
        are unsupported and HTML falls back to tag stripping.
    openai_client : openai.OpenAI | None
        Client used for audio transcription.
    transcription_model : str
        Transcription model name (``whisper-1``).
    """

    def __init__(self, chat_model=None, openai_client=None, transcription_model: str = "whisper-1"):
        self.chat_model = chat_model
        self.openai_client = openai_client
        self.transcription_model = transcription_model
        self._handlers: Dict[ContentCategory, Callable[[bytes, str, str], Optional[str]]] = {
            ContentCategory.PDF: self._extract_pdf,
            ContentCategory.WORD: self._extract_word,
            ContentCategory.PLAIN_TEXT: self._extract_plain_text,
            ContentCategory.HTML: self._extract_html,
            ContentCategory.IMAGE: self._extract_image,
            ContentCategory.AUDIO: self._extract_audio,
        }

    def extract(self, data: bytes, mime_type: Optional[str], filename: str) -> Optional[str]:
        """
        Extract text from ``data``.

        Returns
        -------
        str | None
            Trimmed text, or None when the category is unsupported, the handler
            failed, or nothing readable came out.
        """
        category = classify_content(mime_type, filename)
        handler = self._handlers.get(category)
        if handler is None:
            logger.info("No extractor for %s (%s)", filename, mime_type)
            return None
        try:
            text = handler(data, normalize_mime(mime_type, filename), filename)
        except Exception:
            logger.exception("Extraction failed for %s as %s", filename, category.value)
            return None
        if text is None:
            return None
        text = text.strip()
        return text or None

    def _extract_pdf(self, data: bytes, mime: str, filename: str) -> str:
        reader = PdfReader(io.BytesIO(data))
        return "\n".join(page.extract_text() or "" for page in reader.pages)

    def _extract_word(self, data: bytes, mime: str, filename: str) -> str:
        document = DocxDocument(io.BytesIO(data))
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    def _extract_plain_text(self, data: bytes, mime: str, filename: str) -> str:
        return data.decode("utf-8", errors="ignore")

    def _extract_html(self, data: bytes, mime: str, filename: str) -> str:
        markup = data.decode("utf-8", errors="ignore")
        if self.chat_model is None:
            return strip_html(markup)
        response = self.chat_model.invoke([
            SystemMessage(content=HTML_SYSTEM_PROMPT),
            HumanMessage(content=[
                {"type": "text", "text": markup},
                {"type": "text", "text": HTML_USER_PROMPT},
            ]),
        ])
        return lc_text_from_content(response.content)

    def _extract_image(self, data: bytes, mime: str, filename: str) -> Optional[str]:
        if self.chat_model is None:
            logger.info("Image %s skipped: no vision model configured", filename)
            return None
        response = self.chat_model.invoke([
            SystemMessage(content=IMAGE_SYSTEM_PROMPT),
            HumanMessage(content=[{"type": "image_url", "image_url": {"url": to_data_url(data, mime)}}]),
        ])
        return lc_text_from_content(response.content)

    def _extract_audio(self, data: bytes, mime: str, filename: str) -> Optional[str]:
        if self.openai_client is None:
            logger.info("Audio %s skipped: no transcription client configured", filename)
            return None
        audio = io.BytesIO(data)
        audio.name = filename or "audio"
        transcript = self.openai_client.audio.transcriptions.create(model=self.transcription_model, file=audio)
        return getattr(transcript, "text", str(transcript))
