# backend/sellespro/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/sellespro.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///sellespro.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Create the snapshot table at startup when migrations have not been run
    CREATE_SCHEMA_ON_STARTUP = _env_flag("CREATE_SCHEMA_ON_STARTUP", True)

    # Load the seed catalog and accounts when no snapshot exists yet
    SEED_ON_EMPTY = _env_flag("SEED_ON_EMPTY", True)

    BCRYPT_LOG_ROUNDS = int(os.environ.get("BCRYPT_LOG_ROUNDS", "12"))

    # Insight generator endpoint; leave unset to always return the fallback text
    INSIGHTS_URL = os.environ.get("INSIGHTS_URL")
    INSIGHTS_API_KEY = os.environ.get("INSIGHTS_API_KEY")
    INSIGHTS_MODEL = os.environ.get("INSIGHTS_MODEL", "gemini-3-flash-preview")
    INSIGHTS_TIMEOUT_SECONDS = float(os.environ.get("INSIGHTS_TIMEOUT_SECONDS", "10"))

    # Browser origins allowed to call the API (the register web client)
    CORS_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
        ).split(",")
        if origin.strip()
    )
