"""
Document DAO

Purpose
-------
Data-access layer for the `Document` ORM entity: creation, owner-scoped
lookup and per-case listing. Requires a caller-supplied `Session`.
"""

import logging
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from casedesk.database.entities.documents import Document

logger = logging.getLogger(__name__)


class DocumentDao:
    """
    Data Access Object (DAO) for managing Document entities.
    """

    def createDocument(self, session: Session, document: Document) -> Document:
        try:
            session.add(document)
            return document
        except Exception:
            logger.exception("Error in DocumentDao.createDocument")
            raise

    def fetchDocumentForOwner(self, session: Session, document_id: UUID, user_id: UUID,
                              for_update: bool = False) -> Document | None:
        """
        Return the document if it exists and belongs to ``user_id``.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        document_id : UUID
            Document to look up.
        user_id : UUID
            Caller that must own the document.
        for_update : bool
            Lock the row for the rest of the transaction.
        """
        try:
            query = session.query(Document).filter(Document.id == document_id, Document.created_by == user_id)
            if for_update:
                query = query.with_for_update()
            return query.one_or_none()
        except Exception:
            logger.exception("Error in DocumentDao.fetchDocumentForOwner")
            raise

    def fetchDocumentsByCase(self, session: Session, case_id: UUID) -> list[Document]:
        """All documents attached to a case, most recently modified first."""
        try:
            return (
                session.query(Document)
                .filter(Document.case_id == case_id)
                .order_by(desc(Document.last_modified_at))
                .all()
            )
        except Exception:
            logger.exception("Error in DocumentDao.fetchDocumentsByCase")
            raise

    def fetchDocumentsByUser(self, session: Session, user_id: UUID) -> list[Document]:
        try:
            return (
                session.query(Document)
                .filter(Document.created_by == user_id)
                .order_by(desc(Document.last_modified_at))
                .all()
            )
        except Exception:
            logger.exception("Error in DocumentDao.fetchDocumentsByUser")
            raise

    def deleteDocument(self, session: Session, document: Document):
        try:
            session.delete(document)
        except Exception:
            logger.exception("Error in DocumentDao.deleteDocument")
            raise
