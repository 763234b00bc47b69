import logging

from flask import Flask
from flask_cors import CORS
from flask_smorest import Api

from config.config import Config
from API.extensions import limiter
from API.Contact import ContactBlueprint, LedgerWriter, NotificationSender


def create_flask_app(config=None, sender=None, ledger=None):
    """Build the contact service.

    ``sender`` and ``ledger`` default to the SMTP and Google Sheets
    implementations built from ``config``.
    """
    config = config or Config.from_env()

    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": config.CLIENT_ORIGINS}})

    logging.basicConfig(level=config.LOG_LEVEL)
    logger = logging.getLogger(__name__)

    logger.info("Flask app starting....")

    app.config["PROPAGATE_EXCEPTIONS"] = True
    app.config["RATELIMIT_ENABLED"] = config.RATELIMIT_ENABLED
    app.config["CONTACT_RATE_LIMIT"] = config.CONTACT_RATE_LIMIT

    app.config["API_TITLE"] = "Contact REST API"
    app.config["API_VERSION"] = "v1"
    app.config["OPENAPI_VERSION"] = "3.0.3"
    app.config["OPENAPI_URL_PREFIX"] = "/"
    app.config["OPENAPI_SWAGGER_UI_PATH"] = "/swagger-ui"
    app.config[
        "OPENAPI_SWAGGER_UI_URL"
    ] = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"

    limiter.init_app(app)

    api = Api(app)

    app.extensions["contact"] = {
        "config": config,
        "sender": sender or NotificationSender(config),
        "ledger": ledger or LedgerWriter(config),
    }

    @app.errorhandler(405)
    def method_not_allowed(error):
        return {"ok": False, "error": "Method not allowed"}, 405

    @app.errorhandler(429)
    def rate_limited(error):
        return {"ok": False, "error": "Too many requests, please try again later."}, 429

    api.register_blueprint(ContactBlueprint, url_prefix="/api")

    return app
