import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as shuttleslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "shuttleslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens: 7 days absolute lifetime, no idle timeout by default
    TOKEN_LIFETIME_SECONDS = int(os.getenv("TOKEN_LIFETIME_SECONDS", str(7 * 24 * 60 * 60)))
    TOKEN_IDLE_TIMEOUT_SECONDS = int(os.getenv("TOKEN_IDLE_TIMEOUT_SECONDS", "0")) or None

    # Rate limit for register/login/password reset (per IP)
    AUTH_RATE_WINDOW_SECONDS = 60
    AUTH_RATE_MAX_REQUESTS = 5

    # Number of reverse proxies in front of the app whose X-Forwarded-For is
    # trusted (werkzeug ProxyFix). 0 means the socket address is the client.
    TRUSTED_PROXY_COUNT = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))

    # Password policy
    PASSWORD_MIN_LEN = 8
    PASSWORD_MAX_LEN = 128
    PASSWORD_REQUIRE_LETTER = True
    PASSWORD_REQUIRE_DIGIT = True
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Password reset links
    PASSWORD_RESET_TTL_SECONDS = int(os.getenv("PASSWORD_RESET_TTL_SECONDS", "3600"))
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # Court scheduling
    SHUTTLECOCK_PRICE = int(os.getenv("SHUTTLECOCK_PRICE", "120"))
    ADVANCE_BOOKING_DAYS = int(os.getenv("ADVANCE_BOOKING_DAYS", "7"))

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTH_RATE_MAX_REQUESTS = 1000
    BCRYPT_ROUNDS = 4
    SMTP_HOST = None
    LOG_LEVEL = "WARNING"
