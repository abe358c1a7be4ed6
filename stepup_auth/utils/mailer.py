from datetime import datetime
from flask_mail import Message
from flask import current_app
from ..extensions import mail

def send_otp_email(to_email: str, otp: str, ttl_minutes: int) -> None:
    sender = current_app.config.get("MAIL_DEFAULT_SENDER")
    if not sender:
        # Fail fast with a meaningful message (instead of Flask-Mail assertion)
        raise RuntimeError(
            "MAIL_DEFAULT_SENDER is not configured. Set MAIL_DEFAULT_SENDER in .env"
        )

    subject = current_app.config.get("MAIL_OTP_SUBJECT", "Your Login OTP Code")
    body = (
        f"Your OTP code is: {otp}\n\n"
        f"It expires in {ttl_minutes} minutes.\n"
        "If you did not attempt to sign in, please ignore this email."
    )
    html = (
        "<p>Use the code below to complete your login.</p>"
        f"<p style=\"font-size:32px;letter-spacing:6px;font-weight:800\">{otp}</p>"
        f"<p>This code expires in <b>{ttl_minutes} minutes</b>.</p>"
        "<p>If you did not attempt to sign in, you can ignore this email.</p>"
    )
    msg = Message(subject=subject, recipients=[to_email], body=body, html=html, sender=sender)
    mail.send(msg)


class EmailDeliveryGateway:
    """Sends a plaintext code to the e-mail address on the user's account."""

    def __init__(self, credentials):
        self.credentials = credentials

    def deliver(self, user_id, code: str, expires_at: datetime, issued_at: datetime) -> None:
        user = self.credentials.get(user_id)
        if user is None:
            raise LookupError(f"No account for user_id={user_id}")
        ttl_minutes = max(1, round((expires_at - issued_at).total_seconds() / 60))
        send_otp_email(user.email, code, ttl_minutes)
