import logging
from datetime import date

import click
from flask import Flask, request, g
from flask_migrate import Migrate

from config import Config
from routes import (
    health_bp,
    auth_bp,
    profile_bp,
    court_bp,
    booking_bp,
    community_bp,
    tournament_bp,
    events_bp,
)
from models import db
from utils.auth_context import load_current_user
from utils.realtime import init_feed
from security.csrf import require_csrf

CSRF_EXEMPT_PATHS = {
    "/auth/signin",
    "/auth/signup",
    "/health",
}


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(court_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(community_bp)
    app.register_blueprint(tournament_bp)
    app.register_blueprint(events_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Live change feed shared by routes and /events streams
    init_feed(app)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF if user is already authenticated (cookie session)
            if getattr(g, "user", None) is not None:
                failure = require_csrf()
                if failure:
                    return failure

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
from booking import mark_slots, taken_slots
from booking.backend import SqlBookingBackend
from booking.errors import BackendError
from security.session import purge_sessions


def register_cli(app):
    @app.cli.command("availability")
    @click.argument("court_id", type=int)
    @click.option("--date", "date_str", default=None, help="YYYY-MM-DD, defaults to today")
    def availability(court_id, date_str):
        """Print a court's slots for one day, marked free or booked."""
        try:
            target = date.fromisoformat(date_str) if date_str else date.today()
        except ValueError:
            raise click.BadParameter("Use YYYY-MM-DD", param_hint="--date")

        backend = SqlBookingBackend(user_loader=lambda: None)
        try:
            court = backend.fetch_court(court_id)
            taken = taken_slots(backend.fetch_bookings(court_id, target))
        except BackendError as exc:
            raise click.ClickException(exc.message)

        click.echo(f"{court['name']} on {target.isoformat()}")
        slots = mark_slots(court["available_times"], taken)
        if not slots:
            click.echo("  No times available")
        for slot in slots:
            click.echo(f"  {slot['label']}: {'booked' if slot['taken'] else 'free'}")

    @app.cli.command("purge-sessions")
    def purge_sessions_command():
        """Delete revoked and expired login sessions."""
        count = purge_sessions()
        click.echo(f"Purged {count} sessions")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002, threaded=True)
