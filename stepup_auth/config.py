import os
from datetime import timedelta
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # project root (where wsgi.py is)
load_dotenv(BASE_DIR / ".env")

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'stepup_auth.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    API_PREFIX = os.getenv("API_PREFIX", "")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-dev-secret")

    # Sessions: short by default, long when "remember me" was requested
    SESSION_TTL = timedelta(minutes=int(os.getenv("SESSION_TTL_MINUTES", "120")))
    SESSION_REMEMBER_ME_TTL = timedelta(days=int(os.getenv("SESSION_REMEMBER_ME_DAYS", "30")))

    # Hashing
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    OTP_HASH_METHOD = os.getenv("OTP_HASH_METHOD", "pbkdf2:sha256:100000")

    # OTP
    OTP_LENGTH = int(os.getenv("OTP_LENGTH", "6"))
    OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "300"))  # 5 minutes
    OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))
    OTP_MAX_RESENDS = int(os.getenv("OTP_MAX_RESENDS", "3"))
    OTP_RESEND_COOLDOWN_SECONDS = int(os.getenv("OTP_RESEND_COOLDOWN_SECONDS", "0"))  # 0 disables

    # Challenge store: "sql" (shared across workers) or "memory" (single process)
    CHALLENGE_STORE = os.getenv("CHALLENGE_STORE", "sql")
    CHALLENGE_CAS_RETRIES = int(os.getenv("CHALLENGE_CAS_RETRIES", "5"))

    # Mail (SMTP)
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = os.getenv("MAIL_USE_TLS", "true").lower() == "true"
    MAIL_USE_SSL = os.getenv("MAIL_USE_SSL", "false").lower() == "true"
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", MAIL_USERNAME)
    MAIL_OTP_SUBJECT = os.getenv("MAIL_OTP_SUBJECT", "Your Login OTP Code")
    SWAGGER = {"title": "Step-up Login API", "uiversion": 3}
