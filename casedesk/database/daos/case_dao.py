"""
Case DAO

Purpose
-------
Data-access layer for the `Case` ORM entity. Provides:
- Case creation
- Owner-scoped lookups (active cases only)
- Row locking for aggregate updates
- Field updates through plain attribute assignment on fetched rows

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- `fetchActiveCaseForOwner` is the single authorization query: a case that is
  missing, inactive or owned by someone else is indistinguishable (None).
- `fetchCaseForUpdate` issues ``SELECT ... FOR UPDATE`` so concurrent attach
  and detach calls serialize on the case row. Dialects without row locks
  (SQLite) ignore the clause.
"""

import logging
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from casedesk.database.entities.cases import Case

logger = logging.getLogger(__name__)


class CaseDao:
    """
    Data Access Object (DAO) for managing Case entities.
    """

    def createCase(self, session: Session, case: Case) -> Case:
        try:
            session.add(case)
            return case
        except Exception:
            logger.exception("Error in CaseDao.createCase")
            raise

    def fetchActiveCaseForOwner(self, session: Session, case_id: UUID, user_id: UUID) -> Case | None:
        """
        Return the case if it exists, is active and is owned by ``user_id``.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        case_id : UUID
            Case to look up.
        user_id : UUID
            Caller that must own the case.

        Returns
        -------
        Case | None
            The case, or None when it is missing, inactive or foreign.
        """
        try:
            return (
                session.query(Case)
                .filter(Case.id == case_id, Case.created_by == user_id, Case.is_active.is_(True))
                .one_or_none()
            )
        except Exception:
            logger.exception("Error in CaseDao.fetchActiveCaseForOwner")
            raise

    def fetchCaseForUpdate(self, session: Session, case_id: UUID, user_id: UUID) -> Case | None:
        """Same as `fetchActiveCaseForOwner` but locks the row for the rest of the transaction."""
        try:
            return (
                session.query(Case)
                .filter(Case.id == case_id, Case.created_by == user_id, Case.is_active.is_(True))
                .with_for_update()
                .one_or_none()
            )
        except Exception:
            logger.exception("Error in CaseDao.fetchCaseForUpdate")
            raise

    def fetchCasesByUser(self, session: Session, user_id: UUID) -> list[Case]:
        """Active cases of a user, most recently modified first."""
        try:
            return (
                session.query(Case)
                .filter(Case.created_by == user_id, Case.is_active.is_(True))
                .order_by(desc(Case.last_modified_at))
                .all()
            )
        except Exception:
            logger.exception("Error in CaseDao.fetchCasesByUser")
            raise
