from API.Contact.views import blp as ContactBlueprint
from API.Contact.ledger import LedgerWriter
from API.Contact.service import NotificationSender
