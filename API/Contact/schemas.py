"""
Validation for contact-form submissions.

``ContactSchema`` coerces every field to a trimmed string before the
validators run, so a missing key, ``None`` or a number all behave like the
browser sent text.  ``validate_contact`` flattens marshmallow's error
mapping into the ``[{"path": ..., "msg": ...}]`` list the form expects.
"""

from collections.abc import Mapping
from typing import Dict, List, Optional, Tuple

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate

FIELD_ORDER = ("name", "email", "message", "phone")

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class ContactSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(validate=validate.Length(min=2, max=200, error="Invalid name"))
    email = fields.String(validate=validate.Regexp(EMAIL_PATTERN, error="Invalid email"))
    message = fields.String(validate=validate.Length(min=5, max=5000, error="Invalid message"))
    phone = fields.String(validate=validate.Length(max=50, error="Invalid phone"))

    @pre_load
    def coerce_to_text(self, data, **kwargs):
        if not isinstance(data, Mapping):
            data = {}
        return {key: str(data.get(key) or "").strip() for key in FIELD_ORDER}


contact_schema = ContactSchema()


def validate_contact(data) -> Tuple[Optional[Dict[str, str]], List[Dict[str, str]]]:
    """Validate a raw submission.

    Returns ``(payload, [])`` when every field passes, otherwise
    ``(None, errors)`` with one entry per failing field, in form order.
    """
    try:
        return contact_schema.load(data), []
    except ValidationError as err:
        messages = err.messages if isinstance(err.messages, dict) else {}
        errors = []
        for path in FIELD_ORDER:
            if path in messages:
                msgs = messages[path]
                errors.append({"path": path, "msg": msgs[0] if isinstance(msgs, list) else str(msgs)})
        return None, errors
