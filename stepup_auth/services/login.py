"""
The three login operations exposed over HTTP.

Each method returns the wire response body and raises an `AuthError`
subclass on failure; the blueprint only validates input and serializes.
Every outcome is audited, including failures.
"""
from typing import Optional

from ..exceptions import AccountDisabled, AuthError, InvalidCredentials
from ..schemas.user import UserSchema
from ..utils.audit import safe_audit
from ..utils.time import isoformat_z
from .challenge_manager import ChallengeManager
from .credentials import CredentialStore, normalize_email
from .sessions import SessionIssuer

user_schema = UserSchema()


class LoginController:
    def __init__(self, credentials: CredentialStore, challenges: ChallengeManager, sessions: SessionIssuer):
        self.credentials = credentials
        self.challenges = challenges
        self.sessions = sessions

    def login(self, email: str, password: str, remember_me: bool = False) -> dict:
        email = normalize_email(email)
        user = self.credentials.find_by_email(email)

        # Same error for unknown e-mail and wrong password
        if not self.credentials.check_password(user, password):
            safe_audit("LOGIN_FAILED_INVALID_CREDENTIALS", details={"email": email})
            raise InvalidCredentials()

        if not user.is_active:
            safe_audit("LOGIN_FAILED_ACCOUNT_DISABLED", user_id=user.id, details={"email": email})
            raise AccountDisabled(user_id=user.id)

        try:
            issued = self.challenges.issue(user.id, remember_me=remember_me)
        except AuthError as exc:
            safe_audit(f"LOGIN_FAILED_{exc.code}", user_id=user.id, details={"email": email})
            raise

        safe_audit("LOGIN_OTP_ISSUED", user_id=user.id, details={"email": email})
        return {
            "status": "otp_required",
            "message": "OTP sent to your email",
            "challengeToken": issued.token,
            "expiresAt": isoformat_z(issued.expires_at),
            "rememberMe": remember_me,
        }

    def verify_otp(self, challenge_token: str, code: str, remember_me: Optional[bool] = None) -> dict:
        try:
            challenge = self.challenges.verify(challenge_token, code)
        except AuthError as exc:
            safe_audit(f"LOGIN_OTP_FAILED_{exc.code}", user_id=exc.user_id)
            raise

        user = self.credentials.get(challenge.user_id)
        if user is None:
            safe_audit("LOGIN_OTP_FAILED_INVALID_CREDENTIALS", user_id=challenge.user_id)
            raise InvalidCredentials()
        if not user.is_active:
            safe_audit("LOGIN_OTP_FAILED_ACCOUNT_DISABLED", user_id=user.id)
            raise AccountDisabled(user_id=user.id)

        if remember_me is None:
            remember_me = challenge.remember_me
        token = self.sessions.issue(user.id, user.role, remember_me=remember_me, email=user.email)

        self.credentials.record_login(user, self.challenges.clock())
        safe_audit("LOGIN_OTP_VERIFIED", user_id=user.id, details={"role": user.role, "remember_me": remember_me})
        return {
            "status": "success",
            "message": "Login successful",
            "token": token,
            "user": user_schema.dump(user),
        }

    def resend_otp(self, challenge_token: str) -> dict:
        try:
            challenge = self.challenges.resend(challenge_token)
        except AuthError as exc:
            safe_audit(f"LOGIN_OTP_RESEND_FAILED_{exc.code}", user_id=exc.user_id)
            raise

        safe_audit("LOGIN_OTP_RESENT", user_id=challenge.user_id, details={"resend_count": challenge.resend_count})
        return {
            "status": "success",
            "message": "A new OTP has been sent to your email",
            "expiresAt": isoformat_z(challenge.expires_at),
        }
