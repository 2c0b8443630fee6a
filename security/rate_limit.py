from datetime import datetime, timedelta
from functools import wraps
from flask import request, current_app, jsonify

from models import db
from models.ip_rate_limit import IpRateLimit

def _client_ip() -> str:
    # behind a proxy, ProxyFix (TRUSTED_PROXY_COUNT) rewrites remote_addr
    return request.remote_addr or "unknown"

def check_and_increment(scope: str = "auth") -> tuple[bool, int]:
    """
    Returns (allowed, retry_after_seconds).
    Simple fixed window per IP and scope.
    """
    ip = _client_ip()
    now = datetime.utcnow()

    window_seconds = current_app.config.get("AUTH_RATE_WINDOW_SECONDS", 60)
    max_requests = current_app.config.get("AUTH_RATE_MAX_REQUESTS", 5)

    row = IpRateLimit.query.filter_by(ip=ip, scope=scope).first()
    if not row:
        row = IpRateLimit(ip=ip, scope=scope, window_start=now, count=0)
        db.session.add(row)

    window_end = row.window_start + timedelta(seconds=window_seconds)

    # Reset window if expired
    if now >= window_end:
        row.window_start = now
        row.count = 0
        window_end = row.window_start + timedelta(seconds=window_seconds)

    row.count += 1
    db.session.commit()

    if row.count > max_requests:
        retry_after = int((window_end - now).total_seconds())
        return False, max(retry_after, 1)

    return True, 0

def throttle(scope: str = "auth"):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            allowed, retry_after = check_and_increment(scope)
            if not allowed:
                current_app.logger.warning("Rate limit hit for %s on %s", _client_ip(), request.path)
                resp = jsonify(
                    message="Too many requests. Slow down.",
                    error="too_many_requests",
                    retry_after_seconds=retry_after,
                )
                resp.headers["Retry-After"] = str(retry_after)
                return resp, 429
            return fn(*args, **kwargs)
        return wrapper
    return decorator
