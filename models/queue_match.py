from datetime import datetime
from models.db import db

class QueueMatch(db.Model):
    __tablename__ = "queue_matches"

    id = db.Column(db.Integer, primary_key=True)
    queue_session_id = db.Column(
        db.Integer,
        db.ForeignKey("queue_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False, default="active")
    # status values: active, completed
    start_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    end_time = db.Column(db.DateTime, nullable=True)
    shuttlecocks_used = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    queue_session = db.relationship("QueueSession", back_populates="matches")
    court = db.relationship("Court")
    players = db.relationship(
        "QueueMatchPlayer",
        back_populates="queue_match",
        cascade="all, delete-orphan",
        order_by="QueueMatchPlayer.id",
    )
