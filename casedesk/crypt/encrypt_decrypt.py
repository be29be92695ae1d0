import bcrypt
import re


class EncryptionDec:
    """
    Password hashing and password-policy checks used by registration and login.

    Methods
    -------
    hash_password(text: str) -> str
        Hashes a plaintext password using bcrypt with a generated salt.
    check_passwords(plain_text: str, passwd: str) -> bool
        Verifies a plaintext password against a stored bcrypt hash.
    is_valid_password(password: str) -> bool
        Applies the account password policy.
    """

    MIN_PASSWORD_LENGTH = 8

    def hash_password(self, text: str) -> str:
        """
        Hash a plaintext password using bcrypt.

        Parameters
        ----------
        text : str
            The plaintext password.

        Returns
        -------
        str
            The bcrypt hash, decoded as UTF-8 so it fits a TEXT column.
        """
        return bcrypt.hashpw(text.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def check_passwords(self, plain_text: str, passwd: str) -> bool:
        """Return True when ``plain_text`` matches the stored hash ``passwd``."""
        try:
            return bcrypt.checkpw(plain_text.encode("utf-8"), passwd.encode("utf-8"))
        except ValueError:
            # stored value is not a bcrypt hash
            return False

    def is_valid_password(self, password: str) -> bool:
        """
        Validate a password against the account policy.

        Notes
        -----
        - Minimum length: 8 characters
        - Must contain at least one lowercase letter, one uppercase letter
          and one digit
        - Must contain one special character (!@#$%^&*(),.?":{}|<>)
        """
        if len(password) < self.MIN_PASSWORD_LENGTH:
            return False

        checks = (r"[a-z]", r"[A-Z]", r"\d", r"[!@#$%^&*(),.?\":{}|<>]")
        return all(re.search(pattern, password) for pattern in checks)
