from datetime import datetime
from models.db import db

ENTRY_STATUSES = ("waiting", "matched", "playing", "done", "left")

class QueueEntry(db.Model):
    __tablename__ = "queue_entries"

    id = db.Column(db.Integer, primary_key=True)
    queue_session_id = db.Column(
        db.Integer,
        db.ForeignKey("queue_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # either a registered player or a walk-in guest
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    guest_name = db.Column(db.String(255), nullable=True)

    level = db.Column(db.Float, nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default="waiting")
    games_played = db.Column(db.Integer, nullable=False, default=0)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    queue_session = db.relationship("QueueSession", back_populates="entries")
    user = db.relationship("User")
    match_players = db.relationship("QueueMatchPlayer", back_populates="queue_entry", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        if self.user_id:
            return self.user.name if self.user else ""
        return self.guest_name or ""
