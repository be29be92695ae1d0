"""
Case chat: transcript reads and the question/answer orchestration.

`send_message_to_case_ai` runs four steps in strict order:

1. authorize the caller against the case and persist the question;
2. load the case's documents;
3. generate the answer (slow; no transaction is held open meanwhile);
4. persist the answer, timestamped no earlier than the question.

Steps 1, 2 and 4 are separate transactions. If authorization fails nothing is
written; once the question is stored an answer is always stored too, even if
it is one of the generator's fallback messages.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from casedesk.api.llm_pipeline import REPLY_SERVICE_UNAVAILABLE, CaseReplyGenerator
from casedesk.api.models import CaseMessageDetails, CaseReply, DocumentDetails
from casedesk.database.core.case_funcs import fetch_owned_case, require_user
from casedesk.database.daos.case_dao import CaseDao
from casedesk.database.daos.case_message_dao import CaseMessageDao
from casedesk.database.daos.document_dao import DocumentDao
from casedesk.database.entities.case_messages import CaseMessage
from casedesk.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingQuestion:
    """What the later steps need from the first transaction."""
    message_id: uuid.UUID
    timestamp: datetime
    case_id: uuid.UUID
    name: str
    description: Optional[str]


@transactional
def get_case_messages(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID) -> list[CaseMessageDetails]:
    """
    Transcript of a case in chronological order.

    Returns [] for anonymous callers and for cases the caller does not own.
    """
    if user_id is None:
        return []
    if CaseDao().fetchActiveCaseForOwner(session, case_id, user_id) is None:
        return []
    messages = CaseMessageDao().fetchMessagesByCaseId(session, case_id)
    return [CaseMessageDetails.model_validate(message) for message in messages]


@transactional
def _persist_question(session: Session, user_id: uuid.UUID | None, case_id: uuid.UUID,
                      content: str) -> PendingQuestion:
    owner = require_user(user_id)
    case = fetch_owned_case(session, case_id, owner)
    timestamp = datetime.now(timezone.utc)
    message = CaseMessage(
        message_id=uuid.uuid4(),
        case_id=case.id,
        author_id=owner,
        content=content,
        timestamp=timestamp,
        is_ai=False,
    )
    CaseMessageDao().createMessage(session, message)
    return PendingQuestion(message.id, timestamp, case.id, case.name, case.description)


@transactional
def _load_case_documents(session: Session, case_id: uuid.UUID) -> list[DocumentDetails]:
    return [DocumentDetails.model_validate(doc) for doc in DocumentDao().fetchDocumentsByCase(session, case_id)]


@transactional
def _persist_answer(session: Session, user_id: uuid.UUID, question: PendingQuestion, content: str) -> uuid.UUID:
    message = CaseMessage(
        message_id=uuid.uuid4(),
        case_id=question.case_id,
        author_id=user_id,
        content=content,
        timestamp=max(datetime.now(timezone.utc), question.timestamp),
        is_ai=True,
    )
    CaseMessageDao().createMessage(session, message)
    return message.id


def send_message_to_case_ai(user_id: uuid.UUID | None, case_id: uuid.UUID, content: str,
                            generator: CaseReplyGenerator) -> CaseReply:
    """
    Ask a question of a case and record both sides of the exchange.

    Parameters
    ----------
    user_id : UUID | None
        Caller identity; must own the active case.
    case_id : UUID
        Target case.
    content : str
        The question.
    generator : CaseReplyGenerator
        Long-lived answer generator built at startup.

    Returns
    -------
    CaseReply
        Ids of the stored question and answer, plus the answer text.

    Raises
    ------
    NotAuthenticatedError, CaseNotFoundError
        Before anything is written.
    """
    question = _persist_question(user_id=user_id, case_id=case_id, content=content)
    documents = _load_case_documents(case_id=question.case_id)

    try:
        answer = generator.generate(question, documents, content)
    except Exception:
        logger.exception("Reply generation raised for case %s", question.case_id)
        answer = REPLY_SERVICE_UNAVAILABLE

    answer_id = _persist_answer(user_id=user_id, question=question, content=answer)
    logger.info("Case %s: stored question %s and answer %s", question.case_id, question.message_id, answer_id)
    return CaseReply(user_message_id=question.message_id, ai_message_id=answer_id, ai_response=answer)
