import html
import logging
import smtplib
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from API.Contact.errors import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)


def render_text(inquiry):
    return (
        f"Name: {inquiry.name}\n"
        f"Email: {inquiry.email}\n"
        f"Phone: {inquiry.phone or ''}\n"
        f"Message: {inquiry.message}\n"
        f"IP: {inquiry.ip or ''}\n"
        f"UA: {inquiry.user_agent or ''}"
    )


def render_html(inquiry):
    message = html.escape(inquiry.message).replace("\n", "<br/>")

    return (
        f"<p><strong>Name:</strong> {html.escape(inquiry.name)}</p>\n"
        f"<p><strong>Email:</strong> {html.escape(inquiry.email)}</p>\n"
        f"<p><strong>Phone:</strong> {html.escape(inquiry.phone or '')}</p>\n"
        f"<p><strong>Message:</strong><br/>{message}</p>\n"
        f"<hr/>\n"
        f"<p><small>IP: {html.escape(inquiry.ip or '')} &middot; "
        f"UA: {html.escape(inquiry.user_agent or '')}</small></p>"
    )


class NotificationSender:
    """Emails each inquiry to the business through the configured SMTP relay.

    ``transport_factory`` is called as ``factory(host, port, timeout=...)``
    and must return an ``smtplib.SMTP``-like object usable as a context
    manager. It defaults to ``SMTP_SSL`` or ``SMTP`` depending on
    ``SMTP_SECURE``.
    """

    def __init__(self, config, transport_factory=None):
        self.config = config
        self.transport_factory = transport_factory

    def _open_transport(self):
        config = self.config
        factory = self.transport_factory
        if factory is None:
            factory = smtplib.SMTP_SSL if config.SMTP_SECURE else smtplib.SMTP
        return factory(config.SMTP_HOST, config.SMTP_PORT, timeout=config.SMTP_TIMEOUT)

    def build_message(self, inquiry):
        config = self.config

        # Header values must stay on one line.
        name = " ".join(inquiry.name.split())

        msg = MIMEMultipart("alternative")
        msg["Subject"] = f"New Inquiry from {name}"
        msg["From"] = formataddr((config.MAIL_FROM_NAME, config.SMTP_USER))
        msg["To"] = ", ".join(config.mail_recipients)
        msg["Reply-To"] = inquiry.email
        msg.attach(MIMEText(render_text(inquiry), "plain", "utf-8"))
        msg.attach(MIMEText(render_html(inquiry), "html", "utf-8"))
        return msg

    def send(self, inquiry):
        """Send one email for ``inquiry``. Single attempt, no retry.

        Raises:
            ConfigurationError: SMTP user or password is missing.
            DeliveryError: The message could not be built, or the relay
                refused it or was unreachable.
        """
        if not self.config.SMTP_USER or not self.config.SMTP_PASS:
            raise ConfigurationError("SMTP credentials not configured")

        recipients = self.config.mail_recipients

        try:
            raw = self.build_message(inquiry).as_string()
        except MessageError as e:
            raise DeliveryError(f"Could not build message: {e}") from e

        try:
            with self._open_transport() as server:
                if not self.config.SMTP_SECURE:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls()
                        server.ehlo()
                server.login(self.config.SMTP_USER, self.config.SMTP_PASS)
                server.sendmail(self.config.SMTP_USER, recipients, raw)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(str(e) or e.__class__.__name__) from e

        logger.info(f"Inquiry email sent to {', '.join(recipients)} for {inquiry.name}")
