from ..extensions import db
from ..utils.time import utcnow

class LoginChallenge(db.Model):
    __tablename__ = "login_challenges"

    # HMAC digest of the opaque challenge token; the raw token is never stored
    token_digest = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.Uuid, nullable=False, index=True)

    otp_hash = db.Column(db.String(255), nullable=False)
    issued_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    last_sent_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    attempts = db.Column(db.Integer, nullable=False, default=0)
    resend_count = db.Column(db.Integer, nullable=False, default=0)

    state = db.Column(db.String(16), nullable=False, default="pending", index=True)
    consumed = db.Column(db.Boolean, nullable=False, default=False)
    remember_me = db.Column(db.Boolean, nullable=False, default=False)

    # Bumped on every write; compare-and-swap updates match on it
    version = db.Column(db.Integer, nullable=False, default=1)
