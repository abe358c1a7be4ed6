from marshmallow import fields

from ..extensions import ma

class UserSchema(ma.Schema):
    """Minimal user projection returned after a successful login."""
    id = fields.UUID()
    email = fields.Email()
    fullName = fields.Str(attribute="full_name", allow_none=True)
    companyName = fields.Str(attribute="company_name", allow_none=True)
    role = fields.Str()
