from flask import current_app, request
from flask.views import MethodView
from flask_smorest import Blueprint

from API.extensions import limiter
from API.Contact.pipeline import client_ip, health, submit_inquiry

blp = Blueprint("contact", __name__, description="Contact form submissions")


def _render(outcome):
    return outcome.body, outcome.status


@blp.route("/contact")
class Contact(MethodView):

    @limiter.limit(lambda: current_app.config["CONTACT_RATE_LIMIT"])
    def post(self):
        """
        Submit a contact inquiry. Emails the business and logs it to the sheet.
        ---
        tags:
          - Contact
        parameters:
          - in: body
            name: body
            description: Contact form fields.
            required: true
            schema:
              type: object
              required:
                - name
                - email
                - message
              properties:
                name:
                  type: string
                email:
                  type: string
                message:
                  type: string
                phone:
                  type: string
        responses:
          200:
            description: Inquiry sent.
          400:
            description: One or more fields are invalid.
          500:
            description: The email could not be sent.
        """
        contact = current_app.extensions["contact"]

        outcome = submit_inquiry(
            request.method,
            request.get_json(silent=True) or {},
            client_ip(request.headers.get("X-Forwarded-For"), request.remote_addr),
            request.headers.get("User-Agent"),
            contact["sender"],
            contact["ledger"],
            production=contact["config"].is_production,
        )
        return _render(outcome)


@blp.route("/health")
class Health(MethodView):
    def get(self):
        """Liveness probe."""
        return _render(health())
