from functools import wraps
from flask import g, jsonify
from security.session import get_token_from_request
from models.user import User

def load_current_user():
    token = get_token_from_request()
    if not token:
        g.user = None
        g.auth_token = None
        return
    g.auth_token = token
    g.user = User.query.get(token.user_id)

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(message="Unauthenticated", error="unauthenticated"), 401
        return fn(*args, **kwargs)
    return wrapper
