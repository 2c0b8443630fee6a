from flask import Blueprint, jsonify, g, request

from models import db
from models.audit_log import AuditLog
from models.user import ROLES, User
from security.password import hash_password
from security.rbac import superadmin_only
from routes.auth import validate_new_user
from utils.audit import log_event
from utils.resources import user_json
from utils.validation import format_dt, json_body

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.get("/users")
@superadmin_only
def list_users():
    q = User.query

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        q = q.filter(db.or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    role = (request.args.get("role") or "").strip().lower()
    if role:
        q = q.filter(User.role == role)

    users = q.order_by(User.created_at.desc(), User.id.desc()).limit(200).all()
    return jsonify([user_json(u) for u in users]), 200


@admin_bp.post("/users")
@superadmin_only
def create_user():
    data = json_body()
    fields = validate_new_user(data, ROLES)

    user = User(
        name=fields["name"],
        email=fields["email"],
        password_hash=hash_password(fields["password"]),
        role=fields["role"],
    )
    db.session.add(user)
    db.session.commit()

    log_event("ADMIN_USER_CREATE", user_id=g.user.id, entity="user", entity_id=user.id, metadata={"role": user.role})
    return jsonify(user_json(user)), 201


@admin_bp.get("/audit-logs")
@superadmin_only
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    action = request.args.get("action")
    user_id = request.args.get("user_id", type=int)

    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action)
    if user_id is not None:
        q = q.filter(AuditLog.user_id == user_id)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()

    return jsonify([
        {
            "id": r.id,
            "created_at": format_dt(r.timestamp),
            "user_id": r.user_id,
            "action": r.action,
            "entity": r.entity,
            "entity_id": r.entity_id,
            "ip": r.ip,
            "user_agent": r.user_agent,
            "metadata": r.metadata_json,
        }
        for r in rows
    ]), 200
