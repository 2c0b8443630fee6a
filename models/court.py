from datetime import datetime
from models.db import db

class Court(db.Model):
    __tablename__ = "courts"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)

    # NULL is treated as active
    is_active = db.Column(db.Boolean, default=True, nullable=True)

    hourly_rate = db.Column(db.Float, nullable=True)
    reservation_fee_percentage = db.Column(db.Float, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = db.relationship("User", back_populates="courts")
    availabilities = db.relationship(
        "CourtAvailability",
        back_populates="court",
        cascade="all, delete-orphan",
        order_by="CourtAvailability.day_of_week",
    )

    @property
    def is_open_for_play(self) -> bool:
        return self.is_active is None or bool(self.is_active)

    @classmethod
    def active_filter(cls):
        return db.or_(cls.is_active.is_(None), cls.is_active.is_(True))
