class ContactError(Exception):
    """Base class for failures raised by the contact pipeline."""


class ConfigurationError(ContactError):
    """A required secret is missing; raised before any network attempt."""


class DeliveryError(ContactError):
    """The mail relay rejected the message or could not be reached."""


class LedgerError(ContactError):
    """Authenticating against, reading, writing or appending to the ledger failed."""
