from __future__ import annotations

import secrets

from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str, *, method: str = "scrypt") -> str:
    return generate_password_hash(password, method=method)


def verify_password(password: str, encoded: str) -> bool:
    try:
        return check_password_hash(encoded, password)
    except ValueError:
        # stored hash names a method werkzeug does not know
        return False


def new_session_token() -> str:
    return secrets.token_urlsafe(32)
