from routes.health import health_bp
from routes.auth import auth_bp
from routes.admin import admin_bp
from routes.courts import court_bp
from routes.availability import availability_bp
from routes.booking import booking_bp
from routes.queue import queue_bp

__all__ = [
    "health_bp",
    "auth_bp",
    "admin_bp",
    "court_bp",
    "availability_bp",
    "booking_bp",
    "queue_bp",
]
