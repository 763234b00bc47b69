"""
Single-invocation entry point for AWS Lambda behind API Gateway.

Runs the same contact pipeline as the Flask service; only the event and
response framing differ.  Configuration and collaborators are built once
per container and reused across warm invocations.
"""

import base64
import json
import logging

from dotenv import load_dotenv

from config.config import Config
from API.Contact.ledger import LedgerWriter
from API.Contact.pipeline import client_ip, health, submit_inquiry
from API.Contact.service import NotificationSender

logger = logging.getLogger(__name__)

_components = None


def _get_components():
    global _components

    if _components is None:
        load_dotenv()
        config = Config.from_env()
        logging.basicConfig(level=config.LOG_LEVEL)
        _components = (config, NotificationSender(config), LedgerWriter(config))
    return _components


def _header(headers, name):
    name = name.lower()
    for key, value in (headers or {}).items():
        if key.lower() == name:
            return value
    return None


def _parse_body(event):
    raw = event.get("body") or ""
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode("utf-8", errors="replace")
    try:
        return json.loads(raw) if raw else {}
    except ValueError:
        logger.debug("Request body is not valid JSON; treating it as empty")
        return {}


def _cors_headers(config, origin):
    if origin and origin in config.CLIENT_ORIGINS:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Vary": "Origin",
        }
    return {}


def lambda_handler(event, context, components=None):
    config, sender, ledger = components or _get_components()

    headers = event.get("headers") or {}
    method = (event.get("httpMethod") or "").upper()
    path = event.get("path") or ""
    cors = _cors_headers(config, _header(headers, "Origin"))

    if method == "OPTIONS":
        return {"statusCode": 204, "headers": cors, "body": ""}

    if path.rstrip("/").endswith("/health"):
        outcome = health(method)
    else:
        source_ip = ((event.get("requestContext") or {}).get("identity") or {}).get("sourceIp")
        outcome = submit_inquiry(
            method,
            _parse_body(event),
            client_ip(_header(headers, "X-Forwarded-For"), source_ip),
            _header(headers, "User-Agent"),
            sender,
            ledger,
            production=config.is_production,
        )

    return {
        "statusCode": outcome.status,
        "headers": {"Content-Type": "application/json", **cors},
        "body": json.dumps(outcome.body),
    }
