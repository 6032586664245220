"""Password hashing, session identifiers and input format checks."""

import re
import secrets

import bcrypt

# Default bcrypt cost; overridden by Settings.BCRYPT_ROUNDS at call sites.
BCRYPT_ROUNDS = 10

NAME_MIN_LEN = 2
NAME_MAX_LEN = 100
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 6

# 32 random bytes, url-safe encoded (43 chars).
SESSION_ID_BYTES = 32

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_CONTACT_RE = re.compile(r"[0-9]{10}")


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors.
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_session_id() -> str:
    """Return a fresh opaque session identifier."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def is_valid_email(email: str | None) -> bool:
    if not email or len(email) > EMAIL_MAX_LEN:
        return False
    return _EMAIL_RE.fullmatch(email) is not None


def is_valid_name(name: str | None) -> bool:
    return bool(name) and len(name.strip()) >= NAME_MIN_LEN


def is_valid_password(password: str | None) -> bool:
    return bool(password) and len(password) >= PASSWORD_MIN_LEN


def is_valid_contact(contact: str | None) -> bool:
    """Exactly 10 digits, nothing else."""
    return bool(contact) and _CONTACT_RE.fullmatch(contact) is not None


def normalize_email(email: str) -> str:
    return email.strip().lower()
