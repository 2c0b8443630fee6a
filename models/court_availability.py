from datetime import datetime
from models.db import db

class CourtAvailability(db.Model):
    __tablename__ = "court_availabilities"

    id = db.Column(db.Integer, primary_key=True)
    court_id = db.Column(
        db.Integer,
        db.ForeignKey("courts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    day_of_week = db.Column(db.Integer, nullable=False)  # 0=Sunday ... 6=Saturday
    open_time = db.Column(db.Time, nullable=False)
    close_time = db.Column(db.Time, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    court = db.relationship("Court", back_populates="availabilities")

    __table_args__ = (
        # One opening window per court per weekday
        db.UniqueConstraint("court_id", "day_of_week", name="uq_court_day_of_week"),
    )
