from datetime import datetime
from models.db import db

ROLES = ("player", "owner", "queue_master", "superadmin")

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # player, owner, queue_master, superadmin
    role = db.Column(db.String(20), nullable=False, default="player", index=True)
    # self-rated skill level used when joining a queue (1.0 - 7.0)
    level = db.Column(db.Float, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    courts = db.relationship("Court", back_populates="owner")

    def is_superadmin(self) -> bool:
        return self.role == "superadmin"
