from datetime import datetime
from models.db import db

SESSION_STATUSES = ("upcoming", "active", "ended")

class QueueSession(db.Model):
    __tablename__ = "queue_sessions"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="upcoming")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = db.relationship("User")
    entries = db.relationship(
        "QueueEntry",
        back_populates="queue_session",
        cascade="all, delete-orphan",
        order_by="QueueEntry.joined_at",
    )
    matches = db.relationship("QueueMatch", back_populates="queue_session", cascade="all, delete-orphan")
