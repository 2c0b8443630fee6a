from datetime import datetime
from models.db import db

class QueueMatchPlayer(db.Model):
    __tablename__ = "queue_match_players"

    id = db.Column(db.Integer, primary_key=True)
    queue_match_id = db.Column(
        db.Integer,
        db.ForeignKey("queue_matches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    queue_entry_id = db.Column(
        db.Integer,
        db.ForeignKey("queue_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    team = db.Column(db.String(1), nullable=False, default="A")  # "A" or "B"

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    queue_match = db.relationship("QueueMatch", back_populates="players")
    queue_entry = db.relationship("QueueEntry", back_populates="match_players")
