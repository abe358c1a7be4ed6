import secrets
from werkzeug.security import generate_password_hash, check_password_hash

def generate_otp(length: int = 6) -> str:
    """Uniformly random numeric code; leading zeros are part of the code."""
    return str(secrets.randbelow(10 ** length)).zfill(length)

def hash_otp(otp: str, method: str = "pbkdf2:sha256") -> str:
    # Salted, so equal codes on different challenges hash differently
    return generate_password_hash(otp, method=method)

def verify_otp(otp: str, otp_hash: str) -> bool:
    # check_password_hash compares digests with hmac.compare_digest
    return check_password_hash(otp_hash, otp)
