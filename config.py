import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as barbershop.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "barbershop.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Gap kept between consecutive services (minutes, split across both ends of a free interval)
    BUFFER_MINUTES = int(os.getenv("BUFFER_MINUTES", "10"))

    # Auto-rejection of appointments nobody approved
    PENDING_TIME_LIMIT_MINUTES = int(os.getenv("PENDING_TIME_LIMIT_MINUTES", "120"))  # 2 hours
    SWEEP_INTERVAL_MINUTES = int(os.getenv("SWEEP_INTERVAL_MINUTES", "15"))
    SWEEPER_ENABLED = os.getenv("SWEEPER_ENABLED", "true").lower() == "true"

    # Queue tokens, e.g. APPT-20250101-3F9A
    TOKEN_PREFIXES = {
        "appointment": "APPT",
        "walkin": "WALKIN",
    }
    TOKEN_DELIMITER = "-"
    TOKEN_MAX_ATTEMPTS = 5

    # Service durations in minutes, keyed by normalized service name
    SERVICE_DURATIONS = {
        "haircut": 30,
        "haircut-and-beard": 45,
        "beard-trim": 15,
        "haircut-and-styling": 60,
        "coloring": 90,
        "styling": 30,
        "kids-haircut": 20,
        "shave": 30,
        "facial": 45,
        "full-service": 90,
    }
    DEFAULT_SERVICE_DURATION = 30

    # Max future working-hours / blocked-slot entries per barber
    ROSTER_ENTRY_LIMIT = 7

    # Treat pending appointments with only a requested time as busy
    BLOCK_UNCONFIRMED_REQUESTS = os.getenv("BLOCK_UNCONFIRMED_REQUESTS", "false").lower() == "true"

    # Basic app settings
    DEBUG = False
