from datetime import datetime
from models.db import db

class IpRateLimit(db.Model):
    __tablename__ = "ip_rate_limits"

    id = db.Column(db.Integer, primary_key=True)
    ip = db.Column(db.String(64), nullable=False, index=True)
    # which throttled route group this counter belongs to, e.g. "auth"
    scope = db.Column(db.String(32), nullable=False, default="auth")

    window_start = db.Column(db.DateTime, nullable=False)
    count = db.Column(db.Integer, default=0, nullable=False)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("ip", "scope", name="uq_ip_rate_limit_scope"),
    )
