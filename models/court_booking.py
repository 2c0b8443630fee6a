from datetime import datetime
from models.db import db

class CourtBooking(db.Model):
    __tablename__ = "court_bookings"

    id = db.Column(db.Integer, primary_key=True)

    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)

    status = db.Column(db.String(20), nullable=False, default="confirmed")
    # status values: confirmed, cancelled
    payment_status = db.Column(db.String(20), nullable=True, default="reserved")
    # payment_status values: reserved, paid

    shuttlecock_count = db.Column(db.Integer, nullable=True)
    started_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    court = db.relationship("Court")
    user = db.relationship("User")
