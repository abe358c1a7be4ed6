from typing import Optional
from sqlalchemy import func

from ..extensions import db
from ..models.user import User
from ..utils.security import burn_password_check


def normalize_email(value) -> str:
    return str(value or "").strip().lower()


class CredentialStore:
    """Read access to user accounts plus password checks."""

    def find_by_email(self, email: str) -> Optional[User]:
        return User.query.filter(func.lower(User.email) == normalize_email(email)).first()

    def get(self, user_id) -> Optional[User]:
        return db.session.get(User, user_id)

    def check_password(self, user: Optional[User], password: str) -> bool:
        # Unknown accounts still pay for a hash comparison
        if user is None:
            return burn_password_check(password)
        return user.check_password(password)

    def record_login(self, user: User, when) -> None:
        user.last_login_at = when
        db.session.commit()
