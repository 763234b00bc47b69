import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

TRUTHY = ("true", "1", "yes", "on")


def _flag(value, default):
    if value is None or value == "":
        return default
    return str(value).strip().lower() in TRUTHY


def _origins(value):
    if not value:
        return ["http://localhost:5173"]
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass(frozen=True)
class Config:
    """Process-wide settings, read once at start-up and passed to each component."""

    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_SECURE: bool = True
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SMTP_TIMEOUT: int = 20
    MAIL_TO: Optional[str] = None
    MAIL_FROM_NAME: str = "Omkar Interiors"

    GOOGLE_SHEET_ID: Optional[str] = None
    GOOGLE_CLIENT_EMAIL: Optional[str] = None
    GOOGLE_PRIVATE_KEY: Optional[str] = None

    CLIENT_ORIGINS: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    ENVIRONMENT: str = "development"
    PORT: int = 3001
    CONTACT_RATE_LIMIT: str = "10 per minute"
    RATELIMIT_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def is_production(self):
        return self.ENVIRONMENT.lower() == "production"

    @property
    def mail_recipients(self):
        """``MAIL_TO`` split on commas, else the sender mailbox."""
        if self.MAIL_TO:
            recipients = [addr.strip() for addr in self.MAIL_TO.split(",") if addr.strip()]
            if recipients:
                return recipients
        return [self.SMTP_USER] if self.SMTP_USER else []

    @property
    def private_key(self):
        # Keys pasted into a single-line env var carry literal "\n" sequences.
        if not self.GOOGLE_PRIVATE_KEY:
            return None
        return self.GOOGLE_PRIVATE_KEY.replace("\\n", "\n")

    @property
    def ledger_configured(self):
        return bool(self.GOOGLE_SHEET_ID and self.GOOGLE_CLIENT_EMAIL and self.GOOGLE_PRIVATE_KEY)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a ``Config`` from environment variables.

        ``environ`` defaults to ``os.environ``; tests pass a plain dict.
        """
        env = os.environ if environ is None else environ

        return cls(
            SMTP_HOST=env.get("SMTP_HOST") or "smtp.gmail.com",
            SMTP_PORT=int(env.get("SMTP_PORT") or 465),
            SMTP_SECURE=_flag(env.get("SMTP_SECURE"), True),
            SMTP_USER=env.get("SMTP_USER") or None,
            SMTP_PASS=env.get("SMTP_PASS") or None,
            SMTP_TIMEOUT=int(env.get("SMTP_TIMEOUT") or 20),
            MAIL_TO=env.get("MAIL_TO") or None,
            MAIL_FROM_NAME=env.get("MAIL_FROM_NAME") or "Omkar Interiors",
            GOOGLE_SHEET_ID=env.get("GOOGLE_SHEET_ID") or None,
            GOOGLE_CLIENT_EMAIL=env.get("GOOGLE_CLIENT_EMAIL") or None,
            GOOGLE_PRIVATE_KEY=env.get("GOOGLE_PRIVATE_KEY") or None,
            CLIENT_ORIGINS=_origins(env.get("CLIENT_ORIGIN")),
            ENVIRONMENT=env.get("APP_ENV") or env.get("NODE_ENV") or "development",
            PORT=int(env.get("PORT") or 3001),
            CONTACT_RATE_LIMIT=env.get("CONTACT_RATE_LIMIT") or "10 per minute",
            RATELIMIT_ENABLED=_flag(env.get("RATELIMIT_ENABLED"), True),
            LOG_LEVEL=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
