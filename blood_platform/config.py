import os
from dataclasses import dataclass
from typing import Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    # If python-dotenv isn't installed, fall back to the process environment.
    pass


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Defaults are read from the environment at import time. Tests construct a
    Config with explicit keyword overrides instead.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Core
    # -----------------
    # "production" hides stack traces in 500 responses.
    APP_ENV: str = os.environ.get("APP_ENV", "development")

    # Preferred: set BLOOD_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: BLOOD_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("BLOOD_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("BLOOD_DB_PATH", "./blood_platform.sqlite")
    )

    # Upper bound for a single store call (connect + statement). No retries are attempted.
    STORE_TIMEOUT_SECONDS: float = float(os.environ.get("STORE_TIMEOUT_SECONDS", "10"))

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set AUTH_JWT_SECRET to a strong random value.
    AUTH_JWT_SECRET: str = os.environ.get("AUTH_JWT_SECRET", "dev_change_me")
    AUTH_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("AUTH_TOKEN_EXPIRE_MINUTES", "10080"))  # 7 days

    # Bootstrap first admin user if users table is empty.
    # Unlike a username/password demo, nothing is created unless both are set.
    AUTH_BOOTSTRAP_ADMIN_EMAIL: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_EMAIL", "")
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "")

    # -----------------
    # Identity provider (social login)
    # -----------------
    # trust:     accept (email, displayName, externalId) as posted by the frontend SDK
    # tokeninfo: require an idToken and verify it against IDP_TOKENINFO_URL
    IDP_MODE: str = os.environ.get("IDP_MODE", "trust")
    IDP_TOKENINFO_URL: str = os.environ.get(
        "IDP_TOKENINFO_URL",
        "https://oauth2.googleapis.com/tokeninfo",
    )
    IDP_AUDIENCE: str | None = (os.environ.get("IDP_AUDIENCE") or "").strip() or None
    IDP_TIMEOUT_SECONDS: float = float(os.environ.get("IDP_TIMEOUT_SECONDS", "10"))

    # -----------------
    # CORS (development)
    # -----------------
    # If you develop with Vite on :5173 and API on :5000, allow that origin.
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
    )

    # -----------------
    # Funding (Stripe)
    # -----------------
    # Required only for /api/funds/payment-intent. Recording a fund works without it.
    STRIPE_SECRET_KEY: str | None = os.environ.get("STRIPE_SECRET_KEY")
    STRIPE_CURRENCY: str = os.environ.get("STRIPE_CURRENCY", "usd")

    # Verbose request errors (stack traces) even in production. Leave off.
    DEBUG_ERRORS: bool = _env_bool("DEBUG_ERRORS", False) is True

    @property
    def is_production(self) -> bool:
        return (self.APP_ENV or "").strip().lower() == "production"


def load_config() -> Config:
    return Config()
