"""
Service-layer operations for user accounts and sessions.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically. Each function accepts (and
uses) an injected `session: Session` provided by the decorator, so callers pass
every other argument by keyword.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from casedesk.api.models import UserOpenData
from casedesk.crypt.encrypt_decrypt import EncryptionDec
from casedesk.database.core.exceptions import InvalidCredentialsError, RegistrationError
from casedesk.database.daos.user_dao import UserDao
from casedesk.database.entities.user import User
from casedesk.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


@transactional
def login_user(session: Session, username: str, password: str) -> UserOpenData:
    """
    Authenticate a user by username and password.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    username : str
        Username to authenticate.
    password : str
        Plaintext password to verify.

    Returns
    -------
    UserOpenData
        Public profile of the authenticated user.

    Raises
    ------
    InvalidCredentialsError
        Unknown username or wrong password. The two cases share one message.
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    users_fetched = user_dao.fetchUser(session, username)
    if not users_fetched or not enc.check_passwords(password, users_fetched[0].password):
        logger.info("Rejected login for %s", username)
        raise InvalidCredentialsError()
    return UserOpenData.model_validate(users_fetched[0])


@transactional
def check_create_user_instance(session: Session, username: str, password: str, email: str) -> UserOpenData:
    """
    Validate uniqueness and password policy, then create a new user.

    Raises
    ------
    RegistrationError
        Username or email taken, or the password fails the policy.
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    if user_dao.fetchUser(session=session, username=username):
        raise RegistrationError("User already exists")
    if user_dao.fetchUserByEmail(session=session, email=email):
        raise RegistrationError("Email already exists")
    if not enc.is_valid_password(password):
        raise RegistrationError(
            "Password is invalid. Must contain at least 1 lowercase, 1 uppercase, 1 digit, and 1 special character."
        )

    user = User(
        user_name=username,
        password=password,
        email=email,
        date_created_on=datetime.now(timezone.utc),
    )
    user_dao.createUser(session=session, user_data=user)
    logger.info("Registered user %s", user.id)
    return UserOpenData.model_validate(user)


@transactional
def update_token(session: Session, user_id: uuid.UUID, token: str | None) -> None:
    """
    Store (or clear, with ``None``) the session token issued to a user.
    """
    UserDao().updateToken(session, user_id, token)


@transactional
def get_user_profile(session: Session, user_id: uuid.UUID) -> UserOpenData | None:
    """
    Return the public profile of a user, or None if the account no longer exists.
    """
    user = UserDao().fetchUserById(session, user_id)
    return UserOpenData.model_validate(user) if user else None


@transactional
def is_current_token(session: Session, user_id: uuid.UUID, token: str) -> bool:
    """
    True when ``token`` is the last token issued to the user.

    Logging in again or logging out replaces the stored token, which retires
    every earlier cookie.
    """
    user = UserDao().fetchUserById(session, user_id)
    return user is not None and user.session_id == token
