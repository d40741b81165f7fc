"""
Password hashing and input rules.

Passwords are hashed with bcrypt (salted, deliberately slow). bcrypt only
reads the first 72 bytes of its input, so longer passwords are rejected
instead of being silently truncated.
"""
import logging

import bcrypt

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72
BCRYPT_ROUNDS = 12


def password_problem(password: str) -> str | None:
    """Return a message describing why ``password`` is unacceptable, or None."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
    if not password.strip():
        return "Password cannot be blank"
    return None


def email_problem(email: str) -> str | None:
    """
    Return a message describing why ``email`` is malformed, or None.

    Accepts ``local@domain.tld``: exactly one ``@``, a non-empty local part,
    and a domain made of at least two non-empty dot-separated labels.
    """
    if not email:
        return "Email is required"
    if any(ch.isspace() for ch in email):
        return "Email must not contain whitespace"
    if email.count("@") != 1:
        return "Invalid email format"
    local, domain = email.split("@")
    if not local:
        return "Invalid email format"
    labels = domain.split(".")
    if len(labels) < 2 or any(not label for label in labels):
        return "Invalid email format"
    return None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    """Hash a password with a fresh salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        # Malformed hash in the database, or input beyond bcrypt's limit
        logger.warning(f"[AUTH] Password verification error: {e}")
        return False
