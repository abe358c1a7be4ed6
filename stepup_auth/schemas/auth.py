from marshmallow import Schema, fields, validate, EXCLUDE

class LoginSchema(Schema):
    """Schema for login request"""
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=128),
    )
    rememberMe = fields.Bool(required=False)

class VerifyOtpSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    otp = fields.Str(
        required=True,
        validate=validate.Regexp(r"^\d{4,10}$", error="OTP must be numeric"),
    )
    challengeToken = fields.Str(required=True, validate=validate.Length(min=1, max=512))
    rememberMe = fields.Bool(required=False)

class ResendOtpSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    challengeToken = fields.Str(required=True, validate=validate.Length(min=1, max=512))
