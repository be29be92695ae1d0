"""
The `crypt` package holds the password utilities behind registration and
login.

Contents
--------
- encrypt_decrypt
    Exposes the `EncryptionDec` class:
        * `hash_password` - bcrypt hash of a plaintext password
        * `check_passwords` - verify a plaintext password against a stored hash
        * `is_valid_password` - password policy (8+ chars, lowercase,
          uppercase, digit and special character)
"""
