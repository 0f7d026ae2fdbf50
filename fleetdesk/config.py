"""Application settings, read from the environment (and a local .env file)."""
import os

from dotenv import load_dotenv

load_dotenv()


def _bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _channels(raw: str | None) -> tuple:
    return tuple(c.strip() for c in (raw or "").split(",") if c.strip())


def engine_options(uri: str, timeout: float) -> dict:
    """Bound every storage call by ``timeout`` seconds."""
    if uri.startswith("sqlite"):
        return {"connect_args": {"timeout": timeout}}
    return {"pool_pre_ping": True, "pool_timeout": timeout,
            "connect_args": {"connect_timeout": int(timeout)}}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///fleetdesk.db")
    STORAGE_TIMEOUT = float(os.getenv("STORAGE_TIMEOUT", "10"))
    SQLALCHEMY_ENGINE_OPTIONS = engine_options(SQLALCHEMY_DATABASE_URI, STORAGE_TIMEOUT)

    # A vehicle returned on day D can only go out again on D+1 unless enabled.
    ALLOW_SAME_DAY_CHANGEOVER = _bool("ALLOW_SAME_DAY_CHANGEOVER", False)

    APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Kuala_Lumpur")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Pricing fallbacks when staff leave a field empty
    DEFAULT_DAILY_RATE = float(os.getenv("DEFAULT_DAILY_RATE", "120"))
    DEFAULT_DEPOSIT_DAYS = int(os.getenv("DEFAULT_DEPOSIT_DAYS", "2"))
    DEFAULT_MILEAGE_LIMIT = int(os.getenv("DEFAULT_MILEAGE_LIMIT", "300"))
    DEFAULT_EXTRA_MILEAGE_CHARGE = float(os.getenv("DEFAULT_EXTRA_MILEAGE_CHARGE", "1.5"))

    NOTIFICATION_CHANNELS = _channels(os.getenv("NOTIFICATION_CHANNELS"))
    # Relative paths resolve against the Flask instance folder
    DOCUMENT_DIR = os.getenv("DOCUMENT_DIR", "backups")


class TestConfig(Config):
    __test__ = False  # not a pytest class

    TESTING = True
    SECRET_KEY = "test"
    LOG_LEVEL = "WARNING"
    NOTIFICATION_CHANNELS = ()
