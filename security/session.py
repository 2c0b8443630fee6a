import hashlib
import secrets
from datetime import datetime, timedelta
from flask import request, current_app

from models import db
from models.auth_token import AuthToken

def hash_token(token: str) -> str:
    # SHA-256 is fine for hashing random bearer tokens
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def _bearer_token():
    header = request.headers.get("Authorization") or ""
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()

def create_token(user_id: int) -> str:
    """
    Creates a server-side API token and returns the RAW bearer token.
    Only the hash is stored in DB.
    """
    raw_token = secrets.token_urlsafe(32)

    lifetime = current_app.config.get("TOKEN_LIFETIME_SECONDS", 7 * 24 * 60 * 60)
    expires_at = datetime.utcnow() + timedelta(seconds=lifetime)

    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    user_agent = (request.headers.get("User-Agent") or "")[:255]

    row = AuthToken(
        user_id=user_id,
        token_hash=hash_token(raw_token),
        expires_at=expires_at,
        ip=ip,
        user_agent=user_agent,
    )
    db.session.add(row)
    db.session.commit()
    return raw_token

def get_token_from_request():
    raw_token = _bearer_token()
    if not raw_token:
        return None

    now = datetime.utcnow()
    row = (
        AuthToken.query
        .filter_by(token_hash=hash_token(raw_token), revoked=False)
        .first()
    )
    if not row:
        return None

    # Absolute expiry
    if row.expires_at <= now:
        return None

    # Optional idle timeout
    idle_seconds = current_app.config.get("TOKEN_IDLE_TIMEOUT_SECONDS")
    last_used = row.last_used_at or row.created_at
    if idle_seconds and (last_used + timedelta(seconds=idle_seconds)) <= now:
        return None

    row.last_used_at = now
    db.session.commit()

    return row


def revoke_token(row: AuthToken) -> bool:
    if row is None:
        return False
    row.revoked = True
    db.session.commit()
    return True

def revoke_all_tokens(user_id: int) -> int:
    rows = AuthToken.query.filter_by(user_id=user_id, revoked=False).all()
    for row in rows:
        row.revoked = True
    db.session.commit()
    return len(rows)
