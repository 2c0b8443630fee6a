from datetime import datetime
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    # NULL for anonymous events such as a failed login on an unknown email
    user_id = db.Column(db.Integer, nullable=True, index=True)
    action = db.Column(db.String(80), nullable=False, index=True)  # LOGIN_FAIL, BOOKING_CREATE, QUEUE_MATCH_COMPLETE ...
    entity = db.Column(db.String(80), nullable=True)   # court, court_booking, queue_session ...
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    # free-form JSON text, e.g. the fields changed by an update
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
