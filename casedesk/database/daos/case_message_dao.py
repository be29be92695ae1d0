"""
Case Messages DAO

Purpose
-------
Data-access layer for the `CaseMessage` ORM entity. Provides:
- Message creation
- Retrieval of a case transcript in chronological order

Ordering
--------
Messages are returned by ``timestamp`` ascending. When a question and its
answer share a timestamp the question (``is_ai = False``) sorts first, so a
transcript never shows an answer before the message it replies to.
"""

import logging
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.orm import Session

from casedesk.database.entities.case_messages import CaseMessage

logger = logging.getLogger(__name__)


class CaseMessageDao:
    """
    Data Access Object (DAO) for managing case transcript messages.
    """

    def createMessage(self, session: Session, caseMessage: CaseMessage) -> CaseMessage:
        """
        Stage a new case message.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        caseMessage : CaseMessage
            Message entity instance to be added.

        Returns
        -------
        CaseMessage
            The message object that was added.
        """
        try:
            session.add(caseMessage)
            return caseMessage
        except Exception:
            logger.exception("Error in CaseMessageDao.createMessage")
            raise

    def fetchMessagesByCaseId(self, session: Session, case_id: UUID) -> list[CaseMessage]:
        try:
            return (
                session.query(CaseMessage)
                .filter(CaseMessage.case_id == case_id)
                .order_by(asc(CaseMessage.timestamp), asc(CaseMessage.is_ai))
                .all()
            )
        except Exception:
            logger.exception("Error in CaseMessageDao.fetchMessagesByCaseId")
            raise
