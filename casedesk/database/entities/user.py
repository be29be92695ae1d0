"""
User ORM Model
==============

The ``User`` ORM model represents a registered user in the system. It maps to the
``app_user`` table and holds the credentials used by the cookie-based JWT login.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Username, hashed password, and last issued session token
- Creation timestamp (UTC)
"""

from casedesk.database.config.connection_engine import declarativeBase
from sqlalchemy import VARCHAR, TEXT, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
import uuid
from datetime import datetime


class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the user.
    user_name : str
        Username chosen by the user (max 255 chars, unique).
    password : str
        Bcrypt hash of the user's password.
    email : str
        Email address of the user (unique).
    session_id : str | None
        Last access token issued to the user.
    date_created_on : datetime
        When the account was registered.
    """

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    """Primary key. UUID of the user."""

    user_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True, index=True)
    """Username of the user (max length 255)."""

    password: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Hashed password of the user."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Email address of the user (max length 255)."""

    session_id: Mapped[str] = mapped_column(TEXT, nullable=True)
    """Session token string associated with the user."""

    date_created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    """Datetime when the account was created."""

    def __init__(self, user_name: str, password: str, email: str, date_created_on, session_id: str | None = None):
        """
        Initialize a new User object.

        Parameters
        ----------
        user_name : str
            Username of the user.
        password : str
            Hashed password of the user.
        email : str
            Email address of the user.
        date_created_on : datetime | str
            Creation timestamp. Can be a datetime object or ISO8601 string.
        session_id : str | None
            Session token string for the user.
        """
        self.id = uuid.uuid4()
        self.user_name = user_name
        self.password = password
        self.email = email
        self.session_id = session_id
        if isinstance(date_created_on, str):
            self.date_created_on = datetime.fromisoformat(date_created_on)
        else:
            self.date_created_on = date_created_on

    def __str__(self) -> str:
        return f"User: id:{self.id}, username: {self.user_name}"
