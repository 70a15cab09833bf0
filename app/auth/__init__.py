from app.auth.utils import (
    verify_password,
    get_password_hash,
)

__all__ = [
    "verify_password",
    "get_password_hash",
]
