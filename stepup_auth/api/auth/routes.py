from flask import Blueprint, request
from flasgger import swag_from

from ...schemas.auth import LoginSchema, VerifyOtpSchema, ResendOtpSchema
from ...services import get_login_controller
from ...utils.validation import validate_or_abort

auth_bp = Blueprint("auth", __name__)

login_req_schema = LoginSchema()
verify_req_schema = VerifyOtpSchema()
resend_req_schema = ResendOtpSchema()

_ERROR = {"$ref": "#/definitions/ErrorResponse"}


@auth_bp.post("/login")
@swag_from({
    "tags": ["Auth"],
    "summary": "Login with email and password",
    "description": "Checks email/password and e-mails a one-time code. "
                   "Every login requires the code; no session is returned here.",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "email": {"type": "string", "example": "admin@example.com"},
                "password": {"type": "string", "example": "StrongPass123"},
                "rememberMe": {"type": "boolean", "example": False}
            },
            "required": ["email", "password"]
        }
    }],
    "responses": {
        200: {"description": "OTP sent; challengeToken and expiresAt returned"},
        400: {"description": "Validation error", "schema": _ERROR},
        401: {"description": "Invalid credentials", "schema": _ERROR},
        403: {"description": "User account not active", "schema": _ERROR},
        503: {"description": "OTP could not be delivered", "schema": _ERROR},
    }
})
def login():
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(login_req_schema, payload)

    result = get_login_controller().login(
        payload["email"],
        payload["password"],
        remember_me=payload.get("rememberMe", False),
    )
    return result, 200


@auth_bp.post("/login/verify-otp")
@swag_from({
    "tags": ["Auth"],
    "summary": "Verify the login OTP",
    "description": "Exchanges a pending challenge and its code for a session token.",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "otp": {"type": "string", "example": "042917"},
                "challengeToken": {"type": "string"},
                "rememberMe": {"type": "boolean", "example": False}
            },
            "required": ["otp", "challengeToken"]
        }
    }],
    "responses": {
        200: {"description": "Login successful, token and user returned"},
        400: {"description": "Invalid code or validation error", "schema": _ERROR},
        401: {"description": "Too many attempts", "schema": _ERROR},
        410: {"description": "Challenge expired or unknown", "schema": _ERROR},
    }
})
def verify_otp():
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(verify_req_schema, payload)

    result = get_login_controller().verify_otp(
        payload["challengeToken"],
        payload["otp"],
        remember_me=payload.get("rememberMe"),
    )
    return result, 200


@auth_bp.post("/login/resend-otp")
@swag_from({
    "tags": ["Auth"],
    "summary": "Send a fresh login OTP",
    "description": "Replaces the pending code and restarts its validity window.",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {"challengeToken": {"type": "string"}},
            "required": ["challengeToken"]
        }
    }],
    "responses": {
        200: {"description": "New OTP sent; expiresAt returned"},
        401: {"description": "Too many attempts", "schema": _ERROR},
        410: {"description": "Challenge expired or unknown", "schema": _ERROR},
        429: {"description": "Resend limit reached or too soon", "schema": _ERROR},
    }
})
def resend_otp():
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(resend_req_schema, payload)

    result = get_login_controller().resend_otp(payload["challengeToken"])
    return result, 200
