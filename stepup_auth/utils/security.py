from functools import lru_cache
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

def _method() -> str:
    return current_app.config.get("PASSWORD_HASH_METHOD", "scrypt")

def hash_password(raw_password: str) -> str:
    return generate_password_hash(raw_password, method=_method())

def verify_password(raw_password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, raw_password)

@lru_cache(maxsize=8)
def _dummy_hash(method: str) -> str:
    return generate_password_hash("not-a-real-password", method=method)

def burn_password_check(raw_password: str) -> bool:
    """
    Run a full hash comparison for an unknown account so the response time
    matches a wrong-password attempt. Always returns False.
    """
    check_password_hash(_dummy_hash(_method()), raw_password)
    return False
