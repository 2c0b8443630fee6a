import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config
from routes import health_bp, auth_bp, admin_bp, court_bp, availability_bp, booking_bp, queue_bp

from models import db
from flask_migrate import Migrate
from utils.auth_context import load_current_user
from utils.errors import ApiError


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    proxies = app.config.get("TRUSTED_PROXY_COUNT", 0)
    if proxies:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxies, x_proto=proxies)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(court_bp)
    app.register_blueprint(availability_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(queue_bp)

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

#-------------------------

def register_error_handlers(app):
    def _api_error(err: ApiError):
        if err.status_code >= 500:
            app.logger.error("%s: %s", err.error_code, err.message)
        return jsonify(err.to_dict()), err.status_code

    def _http_error(err: HTTPException):
        if err.code == 404:
            return jsonify(message="Not found", error="not_found"), 404
        code = (err.name or "error").lower().replace(" ", "_")
        return jsonify(message=err.description, error=code), err.code

    app.register_error_handler(ApiError, _api_error)
    app.register_error_handler(HTTPException, _http_error)

#-------------------------
from models.user import User
from security.password import hash_password
from security.password_policy import validate_password

def register_cli(app):
    @app.cli.command("create-superadmin")
    @click.argument("email")
    @click.option("--password", default=None, help="Password (prompted when omitted).")
    def create_superadmin(email, password):
        """Create a superadmin, or promote an existing user by email."""
        email = email.strip().lower()
        if "@" not in email:
            raise click.ClickException("The email must be a valid email address.")

        if not password:
            password = click.prompt("Enter password", hide_input=True, confirmation_prompt=True)

        valid, messages = validate_password(password)
        if not valid:
            raise click.ClickException(" ".join(messages))

        user = User.query.filter_by(email=email).first()
        if user and user.role == "superadmin":
            click.echo("A superadmin with this email already exists.")
            return

        if user:
            user.role = "superadmin"
            user.password_hash = hash_password(password)
            db.session.commit()
            click.echo("Existing user promoted to superadmin.")
            return

        db.session.add(User(
            name="Super Admin",
            email=email,
            role="superadmin",
            password_hash=hash_password(password),
        ))
        db.session.commit()
        click.echo("Superadmin created successfully.")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
