import os

import bcrypt

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
# bcrypt only looks at the first 72 bytes; PHP's password_hash truncates the same way
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_password(password: str, hashed: str | None) -> bool:
    """
    Check a password against a stored bcrypt hash.
    Hashes written by PHP (``$2y$`` prefix) are accepted. A malformed hash never verifies.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(password), hashed.encode("ascii"))
    except ValueError:
        return False
