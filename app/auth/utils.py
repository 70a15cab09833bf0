"""
Credential hashing for partner accounts.

Partners get a username/password so a partner portal can authenticate them;
only the hash is ever stored or returned.
"""

from passlib.context import CryptContext

# pbkdf2_sha256 is pure Python and avoids compiled bcrypt issues across hosts
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed or unknown hash format
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return pwd_context.hash(password)
