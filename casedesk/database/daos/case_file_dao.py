"""
Case File DAO

Data-access layer for `CaseFile` metadata rows. The file bytes themselves are
handled by the blob store, never by this DAO.
"""

import logging
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from casedesk.database.entities.case_files import CaseFile

logger = logging.getLogger(__name__)


class CaseFileDao:

    def createFile(self, session: Session, case_file: CaseFile) -> CaseFile:
        try:
            session.add(case_file)
            return case_file
        except Exception:
            logger.exception("Error in CaseFileDao.createFile")
            raise

    def fetchFileForUser(self, session: Session, file_id: UUID, user_id: UUID) -> CaseFile | None:
        """Return the file if ``user_id`` uploaded it, else None."""
        try:
            return (
                session.query(CaseFile)
                .filter(CaseFile.id == file_id, CaseFile.uploaded_by == user_id)
                .one_or_none()
            )
        except Exception:
            logger.exception("Error in CaseFileDao.fetchFileForUser")
            raise

    def fetchFilesByCase(self, session: Session, case_id: UUID) -> list[CaseFile]:
        try:
            return (
                session.query(CaseFile)
                .filter(CaseFile.case_id == case_id)
                .order_by(desc(CaseFile.created_at))
                .all()
            )
        except Exception:
            logger.exception("Error in CaseFileDao.fetchFilesByCase")
            raise

    def deleteFile(self, session: Session, case_file: CaseFile):
        try:
            session.delete(case_file)
        except Exception:
            logger.exception("Error in CaseFileDao.deleteFile")
            raise
