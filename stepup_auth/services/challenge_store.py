"""
Challenge persistence.

Challenges move between the store and the manager as immutable `Challenge`
snapshots. Every mutation after creation goes through `compare_and_swap`,
which only succeeds when the stored version still equals the version the
caller read, so two concurrent verifications can never both act on the same
attempt counter.
"""
import threading
import uuid
from dataclasses import dataclass, replace, fields
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import delete, select, update

from ..extensions import db
from ..models.login_challenge import LoginChallenge

PENDING = "pending"
VERIFIED = "verified"
EXPIRED = "expired"
EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Challenge:
    token_digest: str
    user_id: uuid.UUID
    otp_hash: str
    issued_at: datetime
    expires_at: datetime
    last_sent_at: datetime
    attempts: int = 0
    resend_count: int = 0
    state: str = PENDING
    consumed: bool = False
    remember_me: bool = False
    version: int = 1

    @property
    def is_pending(self) -> bool:
        return self.state == PENDING

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def evolve(self, **changes) -> "Challenge":
        """Next version of this challenge; terminal states are always consumed."""
        nxt = replace(self, version=self.version + 1, **changes)
        if nxt.state != PENDING and not nxt.consumed:
            nxt = replace(nxt, consumed=True)
        return nxt


_FIELDS = [f.name for f in fields(Challenge)]


class ChallengeStore:
    def get(self, token_digest: str) -> Optional[Challenge]:
        raise NotImplementedError

    def put(self, challenge: Challenge) -> None:
        raise NotImplementedError

    def compare_and_swap(self, expected_version: int, challenge: Challenge) -> bool:
        raise NotImplementedError

    def supersede_pending(self, user_id) -> int:
        """Expire every pending challenge of a user; returns how many."""
        raise NotImplementedError

    def purge(self, before: datetime) -> int:
        """Delete challenges whose expiry is earlier than `before`."""
        raise NotImplementedError


class SQLChallengeStore(ChallengeStore):
    """Shared store on the application database, safe across worker processes."""

    @staticmethod
    def _to_challenge(row: LoginChallenge) -> Challenge:
        return Challenge(**{name: getattr(row, name) for name in _FIELDS})

    def get(self, token_digest):
        row = db.session.execute(
            select(LoginChallenge)
            .where(LoginChallenge.token_digest == token_digest)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return self._to_challenge(row) if row else None

    def put(self, challenge):
        db.session.add(LoginChallenge(**{name: getattr(challenge, name) for name in _FIELDS}))
        db.session.commit()

    def compare_and_swap(self, expected_version, challenge):
        values = {name: getattr(challenge, name) for name in _FIELDS if name != "token_digest"}
        result = db.session.execute(
            update(LoginChallenge)
            .where(
                LoginChallenge.token_digest == challenge.token_digest,
                LoginChallenge.version == expected_version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount == 1

    def supersede_pending(self, user_id):
        result = db.session.execute(
            update(LoginChallenge)
            .where(LoginChallenge.user_id == user_id, LoginChallenge.state == PENDING)
            .values(state=EXPIRED, consumed=True, version=LoginChallenge.version + 1)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount

    def purge(self, before):
        result = db.session.execute(
            delete(LoginChallenge)
            .where(LoginChallenge.expires_at < before)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount


class InMemoryChallengeStore(ChallengeStore):
    """Process-local store for single-worker deployments and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._items: Dict[str, Challenge] = {}

    def get(self, token_digest):
        with self._lock:
            return self._items.get(token_digest)

    def put(self, challenge):
        with self._lock:
            if challenge.token_digest in self._items:
                raise KeyError("challenge token already issued")
            self._items[challenge.token_digest] = challenge

    def compare_and_swap(self, expected_version, challenge):
        with self._lock:
            current = self._items.get(challenge.token_digest)
            if current is None or current.version != expected_version:
                return False
            self._items[challenge.token_digest] = challenge
            return True

    def supersede_pending(self, user_id):
        with self._lock:
            stale = [c for c in self._items.values() if c.user_id == user_id and c.is_pending]
            for c in stale:
                self._items[c.token_digest] = c.evolve(state=EXPIRED)
            return len(stale)

    def purge(self, before):
        with self._lock:
            dead = [k for k, c in self._items.items() if c.expires_at < before]
            for k in dead:
                del self._items[k]
            return len(dead)


def build_store(kind: str) -> ChallengeStore:
    if kind == "memory":
        return InMemoryChallengeStore()
    if kind == "sql":
        return SQLChallengeStore()
    raise ValueError(f"Unknown CHALLENGE_STORE: {kind!r}")
