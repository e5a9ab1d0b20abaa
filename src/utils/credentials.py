"""Password digests and opaque session tokens."""

import logging
import os
import secrets

import bcrypt

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
# bcrypt only looks at the first 72 bytes; newer releases reject anything longer
MAX_PASSWORD_BYTES = 72
TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """Constant-time check of a plaintext password against a stored digest.

    A missing or malformed digest never matches.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError as e:
        logger.warning("Stored password digest is not a bcrypt hash", extra={"error": str(e)})
        return False


def generate_token() -> str:
    """256 bits from the OS CSPRNG, hex encoded (64 chars)."""
    return secrets.token_hex(TOKEN_BYTES)
