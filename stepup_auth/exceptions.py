"""
Login flow error taxonomy.

Every error carries the HTTP status and wire code it renders as, so the
blueprint never has to translate outcomes by hand. Messages are deliberately
low-information: no hint whether an e-mail exists, how many guesses remain,
or whether an unknown challenge token ever existed.
"""
from typing import Optional


class AuthError(Exception):
    status_code = 400
    code = "AUTH_ERROR"
    message = "Authentication failed"

    def __init__(self, message: Optional[str] = None, user_id=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        # Known for audit only, never rendered
        self.user_id = user_id


class InvalidCredentials(AuthError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class AccountDisabled(AuthError):
    status_code = 403
    code = "ACCOUNT_DISABLED"
    message = "Account is not active. Please contact support."


class ChallengeExpired(AuthError):
    status_code = 410
    code = "CHALLENGE_EXPIRED"
    message = "Login challenge expired or invalid. Please sign in again."


class ChallengeNotFound(ChallengeExpired):
    # Same wire shape as an expired challenge
    pass


class TooManyAttempts(AuthError):
    status_code = 401
    code = "TOO_MANY_ATTEMPTS"
    message = "Too many incorrect codes. Please sign in again."


class InvalidCode(AuthError):
    status_code = 400
    code = "INVALID_CODE"
    message = "Invalid verification code"


class ResendLimitExceeded(AuthError):
    status_code = 429
    code = "RESEND_LIMIT_EXCEEDED"
    message = "Too many codes requested. Please sign in again."


class ResendTooSoon(AuthError):
    status_code = 429
    code = "RESEND_COOLDOWN"
    message = "Please wait before requesting another code."


class ChallengeBusy(AuthError):
    status_code = 409
    code = "CHALLENGE_BUSY"
    message = "Login challenge is being updated. Please retry."


class DeliveryFailed(AuthError):
    status_code = 503
    code = "OTP_DELIVERY_FAILED"
    message = "Could not send the verification code. Please try again."
