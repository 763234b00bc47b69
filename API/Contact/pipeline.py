"""
The contact-submission pipeline: validate, notify, then log.

Both the Flask blueprint and the serverless handler call into this module
and only translate ``Outcome`` into their own response objects.
"""

import logging
from datetime import datetime, timezone

from API.Contact.errors import ConfigurationError, DeliveryError
from API.Contact.ledger import record_inquiry
from API.Contact.models import Inquiry, Outcome
from API.Contact.schemas import validate_contact

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send message"


def client_ip(forwarded_for, remote_addr):
    """First hop of ``X-Forwarded-For`` if present, else the socket address."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return remote_addr


def submit_inquiry(method, data, ip, user_agent, sender, ledger, production=False) -> Outcome:
    if (method or "").upper() != "POST":
        return method_not_allowed()

    payload, errors = validate_contact(data)
    if errors:
        return Outcome(400, {"ok": False, "errors": errors})

    inquiry = Inquiry(ip=ip, user_agent=user_agent, **payload)
    logger.info(f"Contact inquiry received from {inquiry.name}")

    try:
        sender.send(inquiry)
    except (ConfigurationError, DeliveryError) as e:
        logger.error(f"Contact error: {e}")
        body = {"ok": False, "error": SEND_FAILED}
        if not production:
            body["detail"] = str(e)
        return Outcome(500, body)

    # The email is the delivery guarantee; the sheet is an audit trail only,
    # so a failed append is logged and the submission still succeeds.
    result = record_inquiry(ledger, inquiry)
    if result.failed:
        logger.warning(f"Sheets append failed: {result.error}")
    elif not result.appended:
        logger.debug(f"Sheets append skipped: {result.reason}")

    return Outcome(200, {"ok": True})


def method_not_allowed() -> Outcome:
    return Outcome(405, {"ok": False, "error": "Method not allowed"})


def health(method="GET") -> Outcome:
    if (method or "").upper() != "GET":
        return method_not_allowed()
    return Outcome(200, {"ok": True, "service": "contact", "time": datetime.now(timezone.utc).isoformat()})
