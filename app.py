import logging

from flask import Flask, jsonify
from config import Config
from routes import (
    health_bp, availability_bp, appointments_bp, walk_ins_bp, queue_bp, roster_bp,
)

from models import db
from flask_migrate import Migrate
from scheduling.errors import SchedulingError
from scheduling.settings import SchedulingSettings
from scheduling.tasks import start_sweeper


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(availability_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(walk_ins_bp)
    app.register_blueprint(queue_bp)
    app.register_blueprint(roster_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Read-only scheduling knobs, built once per app
    app.extensions["scheduling_settings"] = SchedulingSettings.from_config(app.config)

    @app.errorhandler(SchedulingError)
    def _scheduling_error(err):
        return jsonify(err.payload()), err.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    if app.config.get("SWEEPER_ENABLED") and not app.config.get("TESTING"):
        app.extensions["sweeper"] = start_sweeper(app)

    return app

#-------------------------
import click
from models.user import User
from scheduling.queue import get_queue_manager
from scheduling.tasks import reject_stale_appointments

def register_cli(app):
    @app.cli.command("add-barber")
    @click.argument("email")
    @click.argument("name")
    def add_barber(email, name):
        """Create a barber account, or promote an existing user to barber."""
        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if not user:
            user = User(email=email, full_name=name.strip(), role="barber")
            db.session.add(user)
        else:
            user.role = "barber"
            user.is_active = True
        db.session.commit()

        print(f"{user.email} is a barber (id={user.id})")

    @app.cli.command("reject-stale")
    def reject_stale():
        """Run one auto-rejection sweep now."""
        count = reject_stale_appointments()
        print(f"{count} appointment(s) rejected")

    @app.cli.command("reconcile-queue")
    @click.argument("barber_id", type=int)
    @click.argument("date")
    def reconcile_queue(barber_id, date):
        """Re-derive queue entry statuses from their appointments and walk-ins."""
        fixed = get_queue_manager().reconcile(barber_id, date)
        print(f"{fixed} queue entr{'y' if fixed == 1 else 'ies'} fixed")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
