"""
Case AI Pipeline: Context Assembly • Grounded Prompting • Soft-Failing Completion
=================================================================================

Purpose
-------
Answers a question about a case using only the text of the documents in that
case:

- ContextAssembler   : picks the case documents with readable text, most
                       recently edited first, and packs them into a bounded
                       context block ("Document N:" sections).
- CaseReplyGenerator : wraps the block, the case metadata and the question
                       into a system/user prompt pair, calls the chat model and
                       turns every failure into a fixed, displayable message.

Key Components
--------------
- ContextStatus / AssembledContext : result of packing, including the reason
                                     when there is nothing usable.
- build_completion_model           : constructs the `ChatOpenAI` client once at
                                     startup, or None without an API key.
- lc_text_from_content             : normalizes LangChain message content.

Configuration (settings)
------------------------
- settings.API_KEY                    : OpenAI API key (absent = not configured).
- settings.OPEN_AI_MODEL              : chat model name.
- settings.AI_TEMPERATURE             : sampling temperature (0.3).
- settings.AI_MAX_OUTPUT_TOKENS       : completion ceiling (600).
- settings.CONTEXT_PER_DOCUMENT_CHARS : per-document slice (2000).
- settings.CONTEXT_MAX_CHARS          : total context budget (12000).

Failure policy
--------------
`CaseReplyGenerator.generate` always returns a non-empty string. It never
raises for a missing credential, a transport/auth/rate-limit error or an
empty completion; those become the messages in ``REPLY_*`` below.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI

from casedesk.database.config.config import settings

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"

REPLY_NO_DOCUMENTS = (
    "I can help once there are documents with readable text in this case. "
    "Please add or update case documents and ask again."
)
REPLY_NO_USABLE_TEXT = (
    "I wasn't able to find usable text in the attached case documents. "
    "Please provide more detailed content and try again."
)
REPLY_NOT_CONFIGURED = (
    "I received your question but the AI service is not configured. "
    "Please add an OpenAI API key and try again."
)
REPLY_EMPTY_COMPLETION = "I couldn't generate a response right now. Please try again in a few moments."
REPLY_SERVICE_UNAVAILABLE = "I wasn't able to reach the AI service. Please try again later."

SYSTEM_PROMPT = "\n".join([
    "You are Case AI, a legal analyst who strictly relies on the provided case documents.",
    "- Always ground your answers in the supplied context.",
    "- Reference the relevant document titles in parentheses when you cite supporting material.",
    "- If the documents don't contain the answer, explain what is missing instead of guessing.",
])

USER_PROMPT = PromptTemplate.from_template(
    "Case: {case_name}{description_line}\n\n"
    "Context from case documents:\n{context}\n\n"
    "User question:\n{question}\n\n"
    "Write a concise, well-structured answer in the user's language."
)


class ContextDocument(Protocol):
    """Anything with the document fields the assembler reads."""
    title: str
    content: Any
    last_modified_at: Any


class CaseInfo(Protocol):
    name: str
    description: Optional[str]


class ContextStatus(enum.Enum):
    """Outcome of packing a case's documents."""
    OK = "ok"
    NO_DOCUMENTS = "no_documents"
    NO_READABLE_DOCUMENTS = "no_readable_documents"
    NO_USABLE_SECTIONS = "no_usable_sections"


@dataclass
class AssembledContext:
    """
    Accepted sections in selection order.

    ``sections`` holds the "Title: ...\\nContent:\\n..." strings; ``block``
    labels and joins them for the prompt.
    """
    status: ContextStatus
    sections: List[str] = field(default_factory=list)
    titles: List[str] = field(default_factory=list)

    @property
    def usable(self) -> bool:
        return self.status is ContextStatus.OK

    @property
    def total_chars(self) -> int:
        return sum(len(section) for section in self.sections)

    @property
    def block(self) -> str:
        return SECTION_SEPARATOR.join(
            f"Document {index}:\n{section}" for index, section in enumerate(self.sections, start=1)
        )


def recency_key(value) -> float:
    """Sort key for ``last_modified_at``: datetimes, epoch numbers, or missing (0)."""
    if value is None:
        return 0.0
    if isinstance(value, datetime):
        return value.timestamp()
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class ContextAssembler:
    """
    Select and pack case documents into a bounded context.

    Parameters
    ----------
    per_document_chars : int
        Characters taken from the start of each document before trimming.
    max_chars : int
        Budget for the sum of the accepted sections. The first accepted
        section is kept whole even when it alone exceeds the budget.
    """

    def __init__(self, per_document_chars: int = 2000, max_chars: int = 12000):
        self.per_document_chars = per_document_chars
        self.max_chars = max_chars

    @classmethod
    def from_settings(cls) -> "ContextAssembler":
        return cls(settings.CONTEXT_PER_DOCUMENT_CHARS, settings.CONTEXT_MAX_CHARS)

    @staticmethod
    def readable(document: ContextDocument) -> bool:
        content = getattr(document, "content", None)
        return isinstance(content, str) and bool(content.strip())

    def assemble(self, documents: Iterable[ContextDocument]) -> AssembledContext:
        documents = list(documents)
        if not documents:
            return AssembledContext(ContextStatus.NO_DOCUMENTS)

        candidates = [doc for doc in documents if self.readable(doc)]
        if not candidates:
            return AssembledContext(ContextStatus.NO_READABLE_DOCUMENTS)

        # stable: equal timestamps keep their input order
        candidates.sort(key=lambda doc: recency_key(getattr(doc, "last_modified_at", None)), reverse=True)

        sections: List[str] = []
        titles: List[str] = []
        total = 0
        for doc in candidates:
            snippet = doc.content[: self.per_document_chars].strip()
            if not snippet:
                continue
            section = f"Title: {doc.title}\nContent:\n{snippet}"
            if sections and total + len(section) > self.max_chars:
                break
            sections.append(section)
            titles.append(doc.title)
            total += len(section)
            if total >= self.max_chars:
                break

        if not sections:
            return AssembledContext(ContextStatus.NO_USABLE_SECTIONS)
        return AssembledContext(ContextStatus.OK, sections, titles)


def lc_text_from_content(content) -> str:
    """Normalize LangChain message content to plain text.

    - If string → return as-is.
    - If list of content parts → concatenates only 'text' parts (bare strings kept).
    - Else → str(content), with None as "".
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


def build_completion_model(model_name: Optional[str] = None,
                           max_tokens: Optional[int] = None) -> Optional[ChatOpenAI]:
    """
    Construct a chat model, or None when no API key is configured. Called once
    per model from the application lifespan. ``max_tokens`` defaults to
    ``settings.AI_MAX_OUTPUT_TOKENS``.
    """
    if not settings.API_KEY:
        logger.warning("API_KEY is not set; case answers will report the AI service as not configured")
        return None
    kwargs = {}
    if settings.OPENAI_BASE_URL:
        kwargs["base_url"] = settings.OPENAI_BASE_URL
    return ChatOpenAI(
        model=model_name or settings.OPEN_AI_MODEL,
        api_key=settings.API_KEY,
        temperature=settings.AI_TEMPERATURE,
        max_tokens=max_tokens or settings.AI_MAX_OUTPUT_TOKENS,
        **kwargs,
    )


class CaseReplyGenerator:
    """
    Produce a grounded answer for a case question.

    The chat model is injected (built once by the lifespan); ``None`` means the
    AI service is not configured.
    """

    def __init__(self, model=None, assembler: Optional[ContextAssembler] = None):
        self.model = model
        self.assembler = assembler or ContextAssembler.from_settings()

    def build_prompts(self, case: CaseInfo, context: AssembledContext, question: str) -> tuple[str, str]:
        """Return the (system, user) instruction pair for a usable context."""
        description = getattr(case, "description", None)
        user_prompt = USER_PROMPT.format(
            case_name=case.name,
            description_line=f"\nDescription: {description}" if description else "",
            context=context.block,
            question=question,
        )
        return SYSTEM_PROMPT, user_prompt

    def generate(self, case: CaseInfo, documents: Sequence[ContextDocument], question: str) -> str:
        """
        Answer ``question`` from the case documents.

        Returns
        -------
        str
            The model's answer, or one of the fixed fallback messages. Never empty.
        """
        context = self.assembler.assemble(documents)
        if context.status in (ContextStatus.NO_DOCUMENTS, ContextStatus.NO_READABLE_DOCUMENTS):
            return REPLY_NO_DOCUMENTS
        if not context.usable:
            return REPLY_NO_USABLE_TEXT

        if self.model is None:
            logger.warning("Case question received but the AI service is not configured")
            return REPLY_NOT_CONFIGURED

        system_prompt, user_prompt = self.build_prompts(case, context, question)
        try:
            response = self.model.invoke([SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)])
            answer = lc_text_from_content(getattr(response, "content", response)).strip()
        except Exception:
            logger.exception("Case AI completion failed")
            return REPLY_SERVICE_UNAVAILABLE

        if not answer:
            logger.info("Case AI completion was empty")
            return REPLY_EMPTY_COMPLETION
        logger.info("Case AI answered using %d document(s), %d context chars",
                    len(context.sections), context.total_chars)
        return answer
