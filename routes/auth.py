import secrets
from datetime import datetime, timedelta
from urllib.parse import urlencode

from flask import Blueprint, jsonify, current_app, g

from models import db
from models.user import User
from models.password_reset_token import PasswordResetToken
from security.password import hash_password, verify_password
from security.password_policy import validate_password
from security.rate_limit import throttle
from security.session import create_token, hash_token, revoke_token, revoke_all_tokens
from utils.audit import log_event
from utils.auth_context import login_required
from utils.emailer import send_password_reset_email
from utils.resources import user_json
from utils.validation import FieldErrors, json_body


auth_bp = Blueprint("auth", __name__)

SELF_SERVICE_ROLES = ("player", "owner")
RESET_LINK_SENT = "If that email exists, a password reset link has been sent."


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and "." in email.split("@")[-1] and len(email) <= 255


def validate_new_user(data: dict, allowed_roles) -> dict:
    """Shared by self-registration and superadmin user creation."""
    errors = FieldErrors()
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    role = (data.get("role") or "player").strip().lower()

    if not name:
        errors.add("name", "The name field is required.")
    elif len(name) > 255:
        errors.add("name", "The name may not be greater than 255 characters.")

    if not _is_valid_email(email):
        errors.add("email", "The email must be a valid email address.")
    elif User.query.filter_by(email=email).first():
        errors.add("email", "The email has already been taken.")

    valid, messages = validate_password(password)
    if not valid:
        for message in messages:
            errors.add("password", message)
    if "password_confirmation" in data and data.get("password_confirmation") != password:
        errors.add("password", "The password confirmation does not match.")

    if role not in allowed_roles:
        errors.add("role", "The selected role is invalid.")

    errors.raise_if_any()
    return {"name": name, "email": email, "password": password, "role": role}


@auth_bp.post("/register")
@throttle("auth")
def register():
    data = json_body()
    fields = validate_new_user(data, SELF_SERVICE_ROLES)

    user = User(
        name=fields["name"],
        email=fields["email"],
        password_hash=hash_password(fields["password"]),
        role=fields["role"],
    )
    db.session.add(user)
    db.session.commit()
    log_event("REGISTER_SUCCESS", user_id=user.id, metadata={"role": user.role})

    token = create_token(user.id)
    return jsonify(user=user_json(user), token=token), 201


@auth_bp.post("/login")
@throttle("auth")
def login():
    data = json_body()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    errors = FieldErrors()
    if not email:
        errors.add("email", "The email field is required.")
    if not password:
        errors.add("password", "The password field is required.")
    errors.raise_if_any()

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(message="Invalid credentials", error="invalid_credentials"), 401

    token = create_token(user.id)
    log_event("LOGIN_SUCCESS", user_id=user.id)
    return jsonify(user=user_json(user), token=token), 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(user_json(g.user)), 200


@auth_bp.get("/user")
@login_required
def current_user():
    return me()


@auth_bp.post("/logout")
@login_required
def logout():
    revoke_token(g.auth_token)
    log_event("LOGOUT", user_id=g.user.id)
    return jsonify(message="Logged out"), 200


def _reset_url(token: str, email: str) -> str:
    frontend = (current_app.config.get("FRONTEND_URL") or "").rstrip("/")
    return f"{frontend}/reset-password?" + urlencode({"token": token, "email": email})


@auth_bp.post("/forgot-password")
@throttle("auth")
def forgot_password():
    data = json_body()
    email = (data.get("email") or "").strip().lower()

    errors = FieldErrors()
    if not _is_valid_email(email):
        errors.add("email", "The email must be a valid email address.")
    errors.raise_if_any()

    user = User.query.filter_by(email=email).first()
    if user:
        # one live token per email
        PasswordResetToken.query.filter_by(email=email, used_at=None).delete()

        raw_token = secrets.token_urlsafe(32)
        ttl = current_app.config.get("PASSWORD_RESET_TTL_SECONDS", 3600)
        db.session.add(PasswordResetToken(
            email=email,
            token_hash=hash_token(raw_token),
            expires_at=datetime.utcnow() + timedelta(seconds=ttl),
        ))
        db.session.commit()

        sent, error = send_password_reset_email(user, _reset_url(raw_token, email), ttl)
        log_event("PASSWORD_RESET_REQUESTED", user_id=user.id, metadata={"sent": sent, "error": error})

    # same answer whether or not the account exists
    return jsonify(message=RESET_LINK_SENT), 200


@auth_bp.post("/reset-password")
@throttle("auth")
def reset_password():
    data = json_body()
    token = data.get("token") or ""
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    errors = FieldErrors()
    if not isinstance(token, str) or not token:
        errors.add("token", "The token field is required.")
    if not _is_valid_email(email):
        errors.add("email", "The email must be a valid email address.")
    _, messages = validate_password(password)
    for message in messages:
        errors.add("password", message)
    if data.get("password_confirmation") != password:
        errors.add("password", "The password confirmation does not match.")
    errors.raise_if_any()

    row = PasswordResetToken.query.filter_by(token_hash=hash_token(token), email=email, used_at=None).first()
    user = User.query.filter_by(email=email).first()
    if not row or not user or row.expires_at <= datetime.utcnow():
        log_event("PASSWORD_RESET_FAIL", metadata={"email": email})
        return jsonify(message="Invalid or expired reset token.", error="invalid_reset_token"), 400

    user.password_hash = hash_password(password)
    row.used_at = datetime.utcnow()
    db.session.commit()

    revoked = revoke_all_tokens(user.id)
    log_event("PASSWORD_RESET_SUCCESS", user_id=user.id, metadata={"revoked_tokens": revoked})
    return jsonify(message="Password has been reset successfully."), 200
