import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from domain.errors import DomainError
from models import db
from models.enums import Role
from models.user import User
from routes import ALL_BLUEPRINTS
from utils.auth_context import load_current_user
from utils.seed import seed_services

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.before_request
    def _load_user():
        load_current_user()

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(DomainError)
    def _domain_error(exc):
        db.session.rollback()
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(413)
    def _too_large(exc):
        return jsonify(message="Request too large"), 413

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify(message=exc.description or exc.name), exc.code

    @app.errorhandler(Exception)
    def _unhandled(exc):
        db.session.rollback()
        logger.exception("Unhandled error: %s", exc)
        return jsonify(message="Server error"), 500

#-------------------------

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to admin by email (bootstrap)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return

        if user.role != Role.ADMIN.value:
            user.role = Role.ADMIN.value
            db.session.commit()

        click.echo(f"{user.email} promoted to admin")

    @app.cli.command("seed-services")
    def seed_services_command():
        """Insert the default recycling catalog into an empty services table."""
        created = seed_services()
        click.echo(f"Seeded {created} service(s)")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5000)
