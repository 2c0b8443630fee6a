from .db import db
from .user import User, ROLES
from .audit_log import AuditLog
from .auth_token import AuthToken
from .password_reset_token import PasswordResetToken
from .ip_rate_limit import IpRateLimit
from .court import Court
from .court_availability import CourtAvailability
from .court_booking import CourtBooking
from .queue_session import QueueSession
from .queue_entry import QueueEntry
from .queue_match import QueueMatch
from .queue_match_player import QueueMatchPlayer
