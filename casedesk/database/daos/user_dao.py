"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation with password hashing
- Lookup by id, username or email
- Token updates

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller
  (normally injected by `@transactional`); it never commits.
- Passwords are hashed using `EncryptionDec.hash_password(...)` before insert.

Error Handling
--------------
Each method logs the failure with `logger.exception(...)` and re-raises.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from casedesk.crypt.encrypt_decrypt import EncryptionDec
from casedesk.database.entities.user import User

logger = logging.getLogger(__name__)


class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> bool:
        """
        Stage a new user with a hashed password.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : User
            User entity whose ``password`` is still plain text.

        Returns
        -------
        bool
            True once the user is staged.
        """
        try:
            enc = EncryptionDec()
            user_data.password = enc.hash_password(text=user_data.password)
            session.add(user_data)
            return True
        except Exception:
            logger.exception("Error in UserDao.createUser")
            raise

    def fetchUser(self, session: Session, username: str) -> list[User]:
        """Return the user with the given username as a list of at most one row."""
        try:
            return session.query(User).filter(User.user_name == username).limit(1).all()
        except Exception:
            logger.exception("Error in UserDao.fetchUser")
            raise

    def fetchUserByEmail(self, session: Session, email: str) -> list[User]:
        """Return the user with the given email as a list of at most one row."""
        try:
            return session.query(User).filter(User.email == email).limit(1).all()
        except Exception:
            logger.exception("Error in UserDao.fetchUserByEmail")
            raise

    def fetchUserById(self, session: Session, user_id: uuid.UUID) -> User | None:
        try:
            return session.get(User, user_id)
        except Exception:
            logger.exception("Error in UserDao.fetchUserById")
            raise

    def updateToken(self, session: Session, user_id: uuid.UUID, token: str | None):
        """
        Update a user's session token.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : uuid.UUID
            Unique identifier of the user.
        token : str | None
            The new session token, or None to clear it on logout.
        """
        try:
            user = session.query(User).filter(User.id == user_id).one()
            user.session_id = token
        except Exception:
            logger.exception("Error in UserDao.updateToken")
            raise
