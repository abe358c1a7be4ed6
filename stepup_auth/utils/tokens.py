import hashlib
import hmac
import secrets
from typing import Tuple

from flask import current_app

CHALLENGE_TOKEN_BYTES = 32  # 256 bits

def generate_raw_token(nbytes: int = CHALLENGE_TOKEN_BYTES) -> str:
    return secrets.token_urlsafe(nbytes)

def token_digest(raw_token: str) -> str:
    """
    HMAC-SHA256 of a challenge token keyed with SECRET_KEY.
    Only the digest is persisted, so a leaked table cannot be replayed.
    """
    key = current_app.config["SECRET_KEY"].encode("utf-8")
    return hmac.new(key, raw_token.encode("utf-8"), hashlib.sha256).hexdigest()

def new_challenge_token() -> Tuple[str, str]:
    """Fresh (raw token, digest) pair for a new login challenge."""
    raw = generate_raw_token()
    return raw, token_digest(raw)
