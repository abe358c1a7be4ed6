def swagger_template(app=None):
    title = "Step-up Login API"
    version = "1.0.0"

    if app:
        title = app.config.get("SWAGGER_TITLE", title)
        version = app.config.get("SWAGGER_VERSION", version)

    return {
        "swagger": "2.0",
        "info": {"title": title, "version": version},
        "definitions": {
            "ErrorResponse": {
                "type": "object",
                "properties": {
                    "status": {"type": "string", "example": "error"},
                    "code": {"type": "string", "example": "INVALID_CODE"},
                    "message": {"type": "string", "example": "Invalid verification code"},
                    "details": {"type": "object"},
                    "request_id": {"type": "string"}
                }
            }
        }
    }
