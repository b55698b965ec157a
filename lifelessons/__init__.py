from datetime import date, datetime

from flask import Flask
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from config import Config


class ApiJSONProvider(DefaultJSONProvider):
    """Serialise Firestore timestamps as ISO 8601 instead of HTTP dates."""

    @staticmethod
    def default(o):
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.json = ApiJSONProvider(app)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # CORS origin: the site domain when set, otherwise reflect any origin
    site_domain = app.config.get('SITE_DOMAIN')
    CORS(app, origins=[site_domain] if site_domain else '*', supports_credentials=True)

    if not app.config.get('STRIPE_SECRET'):
        app.logger.warning('STRIPE_SECRET is missing; payment endpoints are disabled')

    from lifelessons.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from lifelessons.routes import (
        main, users, lessons, admin, reports, favorites, contact, payments, stats
    )
    app.register_blueprint(main.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(lessons.bp)
    app.register_blueprint(admin.bp)
    app.register_blueprint(reports.bp)
    app.register_blueprint(favorites.bp)
    app.register_blueprint(contact.bp)
    app.register_blueprint(payments.bp)
    app.register_blueprint(stats.bp)

    return app
