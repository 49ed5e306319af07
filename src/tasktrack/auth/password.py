"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks. The work
factor comes from settings (bcrypt_rounds, default 12, roughly 100ms
per hash on modern hardware).
"""

from functools import lru_cache

import bcrypt

# bcrypt only looks at the first 72 bytes of the password.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Passwords are truncated to 72 bytes
    (bcrypt's limit) before hashing.
    """
    pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash.

    bcrypt.checkpw compares digests in constant time. A malformed stored
    hash verifies as False rather than raising.
    """
    try:
        pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> bytes:
    return bcrypt.hashpw(b"tasktrack-dummy-password", bcrypt.gensalt(rounds=rounds))


def burn_verify(password: str, rounds: int = 12) -> None:
    """Spend one bcrypt comparison at the given cost. Result is ignored.

    Used when the email is unknown, so a login for a missing account
    costs the same bcrypt work as one with a wrong password.
    """
    bcrypt.checkpw(password.encode("utf-8")[:MAX_PASSWORD_BYTES], _dummy_hash(rounds))
