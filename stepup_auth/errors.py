from flask import jsonify, g, current_app
from werkzeug.exceptions import HTTPException

from .exceptions import AuthError
from .extensions import db

def _payload(code: str, message: str, details=None, status=400):
    return (
        jsonify({
            "status": "error",
            "code": code,
            "message": message,
            "details": details or None,
            "request_id": getattr(g, "request_id", None),
        }),
        status,
    )

def register_error_handlers(app):
    @app.errorhandler(AuthError)
    def handle_auth_error(e: AuthError):
        return _payload(code=e.code, message=e.message, status=e.status_code)

    # Generic HTTP errors (404, 405, validation aborts, etc.)
    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        desc = e.description

        # If we pass structured error info via abort(description=dict)
        if isinstance(desc, dict):
            code = desc.get("code") or e.name.replace(" ", "_").upper()
            message = desc.get("message") or e.name
            details = desc.get("errors") or desc.get("details")
            return _payload(code=code, message=message, details=details, status=e.code or 400)

        return _payload(
            code=e.name.replace(" ", "_").upper(),
            message=desc or e.name,
            details=None,
            status=e.code or 400
        )

    @app.errorhandler(404)
    def handle_404(_):
        return _payload("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Don't leak internals
        db.session.rollback()
        current_app.logger.exception(
            "Unhandled exception request_id=%s", getattr(g, "request_id", None)
        )
        return _payload("INTERNAL_SERVER_ERROR", "An unexpected error occurred", status=500)
