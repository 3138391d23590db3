"""
Process configuration, read once at import.

Values come from the environment after layering dotenv files:
``.env`` first, then ``ENV_FILE`` if given, otherwise ``.env.<ENVIRONMENT>``.
Variables already set in the process always win.
"""

import os
import re

from dotenv import find_dotenv, load_dotenv

_ENV_ALIASES = {"dev": "development", "prod": "production", "stg": "staging"}


def _dotenv_candidates() -> list[str]:
    explicit = os.environ.get("ENV_FILE")
    if explicit:
        return [".env", explicit]

    slug = (os.environ.get("ENVIRONMENT") or os.environ.get("ENV") or "").strip().lower()
    if not slug:
        return [".env"]
    # files loaded earlier win; override=False never replaces a set variable
    return [".env", f".env.{_ENV_ALIASES.get(slug, slug)}", f".env.{slug}"]


def _load_env_files() -> None:
    for name in dict.fromkeys(_dotenv_candidates()):
        path = name if os.path.isabs(name) else find_dotenv(name, usecwd=True)
        if path and os.path.exists(path):
            load_dotenv(path, override=False)


_load_env_files()


def _get_int_env(var_name: str, default_value: int) -> int:
    """Lenient int: "8060", " 8060; " and "port=8060" all give 8060."""
    raw = os.environ.get(var_name)
    if raw is None:
        return default_value
    match = re.search(r"[-+]?\d+", raw)
    return int(match.group(0)) if match else default_value


def _get_list_env(var_name: str, default: list[str]) -> list[str]:
    # CORS_ORIGINS="http://localhost:5173,https://impressmydate.app"
    items = [item.strip() for item in os.environ.get(var_name, "").split(",") if item.strip()]
    return items or default


# === Environment / Server ===
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")
SERVER_PORT = _get_int_env("SERVER_PORT", 8060)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = _get_list_env("CORS_ORIGINS", ["*"])

# === Database Configuration ===
MONGODB_URI = os.environ.get("MONGODB_URI")
DATABASE_NAME = os.environ.get("DATABASE_NAME", "impress_my_date")

# === Caller authentication (bearer JWT) ===
JWT_SECRET = os.environ.get("JWT_SECRET", "your-secret-key-change-this-in-production")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE", "authenticated") or None

# === Yelp Conversational AI ===
YELP_API_KEY = os.environ.get("YELP_API_KEY")
YELP_AI_CHAT_URL = os.environ.get("YELP_AI_CHAT_URL", "https://api.yelp.com/ai/chat/v2")
YELP_TIMEOUT_SECONDS = _get_int_env("YELP_TIMEOUT_SECONDS", 45)

# === Planning defaults ===
ACTIVITY_RADIUS_METERS = _get_int_env("ACTIVITY_RADIUS_METERS", 1200)
DEFAULT_LOCATION = os.environ.get("DEFAULT_LOCATION", "New York, NY")
DEFAULT_BUDGET = os.environ.get("DEFAULT_BUDGET", "$$")
DEFAULT_RESERVATION_TIME = os.environ.get("DEFAULT_RESERVATION_TIME", "7:00 PM")

# === Application Settings ===
APP_NAME = "Impress My Date API"
APP_VERSION = "1.0.0"
