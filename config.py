import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as shuttlehub.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "shuttlehub.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "shuttlehub_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 30 minutes
    IDLE_TIMEOUT_SECONDS = 30 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # Password policy
    PASSWORD_MIN_LEN = int(os.getenv("PASSWORD_MIN_LEN", "8"))
    PASSWORD_MAX_LEN = 128

    # Listing endpoints never return more than this many rows
    LIST_LIMIT = 200

    # Live change feed (Server-Sent Events)
    FEED_KEEPALIVE_SECONDS = int(os.getenv("FEED_KEEPALIVE_SECONDS", "15"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
