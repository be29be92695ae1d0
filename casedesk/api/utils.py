"""
JWT utilities for issuing and verifying access tokens.

Functions
---------
create_access_token(user_id: UUID) -> str
    Creates a signed JWT whose subject (`sub`) is the user id, with an `exp` claim.
verify_token(token: str) -> UUID | None
    Verify a JWT's signature & expiration and return the user id if valid.

Environment contract (from `settings`)
--------------------------------------
SECRET_KEY : str
    HMAC signing key for JWTs.
ALGORITHM : str
    JWT signing algorithm (e.g., "HS256").
ACCESS_TOKEN_EXPIRE_MINUTES : int
    Token lifetime window in minutes.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from casedesk.database.config.config import settings

logger = logging.getLogger(__name__)


def create_access_token(user_id: uuid.UUID, extra_claims: dict | None = None) -> str:
    """
    Create a signed JWT access token for ``user_id``.

    Notes
    ----------
    - Adds an `exp` (expiration) claim calculated from ACCESS_TOKEN_EXPIRE_MINUTES.
    - Uses `settings.SECRET_KEY` and `settings.ALGORITHM` for signing.
    """
    expires = datetime.now(timezone.utc) + timedelta(minutes=int(settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = dict(extra_claims or {})
    # exp is a NumericDate (seconds since epoch)
    claims.update({"sub": str(user_id), "exp": int(expires.timestamp())})
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str | None) -> Optional[uuid.UUID]:
    """
    Verify a JWT and return the user id in its subject.

    Returns
    ----------
    UUID | None
        None for a missing, malformed, forged or expired token.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return uuid.UUID(payload.get("sub", ""))
    except (JWTError, ValueError, TypeError) as e:
        logger.info("Rejected access token: %s", e)
        return None
