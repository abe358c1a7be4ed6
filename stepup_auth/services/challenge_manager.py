"""
One-time passcode challenges for the second login step.

A challenge is `pending` until it is verified, expires, is superseded by a
newer login, or runs out of guesses; every other state is terminal. Each
transition is computed from a fresh snapshot and written with
compare-and-swap, retrying when another request got there first. Codes are
handed to the delivery gateway only after the write has committed.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from flask import current_app

from ..exceptions import (
    ChallengeBusy,
    ChallengeExpired,
    ChallengeNotFound,
    DeliveryFailed,
    InvalidCode,
    ResendLimitExceeded,
    ResendTooSoon,
    TooManyAttempts,
)
from ..utils.otp import generate_otp, hash_otp, verify_otp
from ..utils.time import utcnow
from ..utils.tokens import new_challenge_token, token_digest
from .challenge_store import (
    EXHAUSTED,
    EXPIRED,
    PENDING,
    VERIFIED,
    Challenge,
    ChallengeStore,
)


@dataclass(frozen=True)
class IssuedChallenge:
    token: str
    expires_at: datetime
    user_id: object


class ChallengeManager:
    def __init__(
        self,
        store: ChallengeStore,
        gateway,
        ttl: timedelta = timedelta(minutes=5),
        max_attempts: int = 5,
        max_resends: int = 3,
        resend_cooldown: timedelta = timedelta(0),
        otp_length: int = 6,
        otp_hash_method: str = "pbkdf2:sha256",
        max_retries: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.gateway = gateway
        self.ttl = ttl
        self.max_attempts = max_attempts
        self.max_resends = max_resends
        self.resend_cooldown = resend_cooldown
        self.otp_length = otp_length
        self.otp_hash_method = otp_hash_method
        self.max_retries = max_retries
        self.clock = clock

    @classmethod
    def from_config(cls, config, store, gateway) -> "ChallengeManager":
        return cls(
            store,
            gateway,
            ttl=timedelta(seconds=config["OTP_TTL_SECONDS"]),
            max_attempts=config["OTP_MAX_ATTEMPTS"],
            max_resends=config["OTP_MAX_RESENDS"],
            resend_cooldown=timedelta(seconds=config["OTP_RESEND_COOLDOWN_SECONDS"]),
            otp_length=config["OTP_LENGTH"],
            otp_hash_method=config["OTP_HASH_METHOD"],
            max_retries=config["CHALLENGE_CAS_RETRIES"],
        )

    # -- operations ---------------------------------------------------------

    def issue(self, user_id, remember_me: bool = False) -> IssuedChallenge:
        now = self.clock()
        superseded = self.store.supersede_pending(user_id)
        if superseded:
            current_app.logger.info("Superseded %d pending challenge(s) user_id=%s", superseded, user_id)

        token, digest = new_challenge_token()
        code = generate_otp(self.otp_length)
        challenge = Challenge(
            token_digest=digest,
            user_id=user_id,
            otp_hash=hash_otp(code, self.otp_hash_method),
            issued_at=now,
            expires_at=now + self.ttl,
            last_sent_at=now,
            remember_me=remember_me,
        )
        self.store.put(challenge)
        current_app.logger.info(
            "Issued login challenge user_id=%s expires_at=%s", user_id, challenge.expires_at
        )

        self._deliver(challenge, code)
        return IssuedChallenge(token=token, expires_at=challenge.expires_at, user_id=user_id)

    def verify(self, token: str, code: str) -> Challenge:
        digest = token_digest(token)
        for _ in range(self.max_retries):
            challenge = self._load(digest)
            now = self.clock()
            self._reject_closed(challenge, now)

            if challenge.state == EXHAUSTED or challenge.attempts >= self.max_attempts:
                raise TooManyAttempts(user_id=challenge.user_id)

            if verify_otp(code, challenge.otp_hash):
                verified = challenge.evolve(state=VERIFIED)
                if self.store.compare_and_swap(challenge.version, verified):
                    current_app.logger.info("Login challenge verified user_id=%s", challenge.user_id)
                    return verified
                continue

            attempts = challenge.attempts + 1
            exhausted = attempts >= self.max_attempts
            failed = challenge.evolve(attempts=attempts, state=EXHAUSTED if exhausted else PENDING)
            if not self.store.compare_and_swap(challenge.version, failed):
                continue

            current_app.logger.info(
                "Wrong OTP user_id=%s attempts=%d exhausted=%s", challenge.user_id, attempts, exhausted
            )
            if exhausted:
                raise TooManyAttempts(user_id=challenge.user_id)
            raise InvalidCode(user_id=challenge.user_id)

        raise ChallengeBusy()

    def resend(self, token: str) -> Challenge:
        digest = token_digest(token)
        for _ in range(self.max_retries):
            challenge = self._load(digest)
            now = self.clock()
            self._reject_closed(challenge, now)

            if challenge.resend_count >= self.max_resends:
                raise ResendLimitExceeded(user_id=challenge.user_id)
            if challenge.state == EXHAUSTED:
                raise TooManyAttempts(user_id=challenge.user_id)
            if self.resend_cooldown and now - challenge.last_sent_at < self.resend_cooldown:
                raise ResendTooSoon(user_id=challenge.user_id)

            code = generate_otp(self.otp_length)
            refreshed = challenge.evolve(
                otp_hash=hash_otp(code, self.otp_hash_method),
                attempts=0,
                resend_count=challenge.resend_count + 1,
                expires_at=now + self.ttl,
                last_sent_at=now,
            )
            if not self.store.compare_and_swap(challenge.version, refreshed):
                continue

            current_app.logger.info(
                "Resent login OTP user_id=%s resend_count=%d", challenge.user_id, refreshed.resend_count
            )
            self._deliver(refreshed, code)
            return refreshed

        raise ChallengeBusy()

    # -- helpers ------------------------------------------------------------

    def _load(self, digest: str) -> Challenge:
        challenge = self.store.get(digest)
        if challenge is None:
            raise ChallengeNotFound()
        return challenge

    def _reject_closed(self, challenge: Challenge, now: datetime) -> None:
        """Raise ChallengeExpired for used, superseded or timed-out challenges."""
        if challenge.state in (VERIFIED, EXPIRED):
            raise ChallengeExpired(user_id=challenge.user_id)
        if challenge.is_expired(now):
            if challenge.is_pending:
                # A failed swap means another request already moved it on
                self.store.compare_and_swap(challenge.version, challenge.evolve(state=EXPIRED))
            raise ChallengeExpired(user_id=challenge.user_id)

    def _deliver(self, challenge: Challenge, code: str) -> None:
        try:
            self.gateway.deliver(challenge.user_id, code, challenge.expires_at, challenge.last_sent_at)
        except Exception as exc:
            current_app.logger.exception("OTP delivery failed user_id=%s", challenge.user_id)
            raise DeliveryFailed(user_id=challenge.user_id) from exc
