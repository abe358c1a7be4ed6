from .user import User  # noqa: F401
from .login_challenge import LoginChallenge  # noqa: F401
from .audit_log import AuditLog  # noqa: F401

# Import ALL models so SQLAlchemy registers them

__all__ = [
    "User",
    "LoginChallenge",
    "AuditLog",
]
