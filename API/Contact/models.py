from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Inquiry:
    """One contact-form submission, normalized. Never persisted by this service."""

    name: str
    email: str
    message: str
    phone: str = ""
    ip: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class Outcome:
    status: int
    body: dict
