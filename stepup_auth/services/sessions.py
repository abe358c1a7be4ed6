from datetime import timedelta
from flask_jwt_extended import create_access_token


class SessionIssuer:
    """
    Mints stateless signed session tokens.

    Validity is decided by signature and `exp` wherever the token is
    presented; nothing is stored here.
    """

    def __init__(self, ttl: timedelta, remember_me_ttl: timedelta):
        self.ttl = ttl
        self.remember_me_ttl = remember_me_ttl

    def issue(self, user_id, role: str, remember_me: bool = False, email: str = None) -> str:
        claims = {"role": role}
        if email:
            claims["email"] = email
        return create_access_token(
            identity=str(user_id),
            additional_claims=claims,
            expires_delta=self.remember_me_ttl if remember_me else self.ttl,
        )
