"""OpenCart customer password hashing.

OpenCart 3 stores ``sha1(salt + sha1(salt + sha1(password)))`` with a
9-character salt; OpenCart 4 switched to PHP ``password_hash`` (bcrypt).
Accounts created by older mobile API builds used a two-round SHA-1 form.
"""

import hashlib
import hmac
import secrets
import string

import bcrypt

SALT_LENGTH = 9
SALT_ALPHABET = string.ascii_letters + string.digits


def _sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def make_salt() -> str:
    return "".join(secrets.choice(SALT_ALPHABET) for _ in range(SALT_LENGTH))


def hash_password(password: str, salt: str) -> str:
    """Hash a password the way the OpenCart 3 storefront does."""
    return _sha1(salt + _sha1(salt + _sha1(password)))


def check_password(password: str, stored_hash: str, salt: str = "") -> bool:
    """Check a plaintext password against a stored OpenCart hash."""
    if not stored_hash or not password:
        return False

    if stored_hash.startswith("$2"):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
        except ValueError:
            return False

    salt = salt or ""
    candidates = (
        hash_password(password, salt),
        _sha1(salt + _sha1(salt + password)),
    )
    return any(hmac.compare_digest(stored_hash, candidate) for candidate in candidates)


def set_password(customer, password: str) -> None:
    """Store a new password on a customer, generating a salt when it has none."""
    if not customer.salt:
        customer.salt = make_salt()
    customer.password = hash_password(password, customer.salt)
