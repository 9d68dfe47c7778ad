import logging
import os
from pathlib import Path
from typing import List

# Load environment variables from .env if available, but avoid during pytest to keep tests deterministic
try:
    from dotenv import load_dotenv
    if "PYTEST_CURRENT_TEST" not in os.environ:
        load_dotenv()
except Exception:
    pass


def env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


def env_bool(name: str, default: bool) -> bool:
    try:
        v = os.getenv(name, "1" if default else "0").strip().lower()
        return v in ("1", "true", "yes", "on")
    except Exception:
        return default


def env_list(name: str, default: str = "") -> List[str]:
    return [p.strip() for p in env_str(name, default).split(",") if p.strip()]


DEFAULT_FALLBACK_RESPONSES_PATH = Path(__file__).resolve().parent / "data" / "fallback_responses.json"


def fallback_responses_path() -> Path:
    override = env_str("FALLBACK_RESPONSES_PATH")
    return Path(override) if override else DEFAULT_FALLBACK_RESPONSES_PATH


# Outbound model call tuning
AI_CHAT_MAX_TOKENS = env_int("AI_CHAT_MAX_TOKENS", 200)
AI_CHAT_TEMPERATURE = env_float("AI_CHAT_TEMPERATURE", 0.8)
AI_CHAT_TOP_P = env_float("AI_CHAT_TOP_P", 0.9)
AI_HTTP_TIMEOUT_SECONDS = env_int("AI_HTTP_TIMEOUT_SECONDS", 30)
CHAT_HISTORY_TURNS = env_int("CHAT_HISTORY_TURNS", 12)

CORS_ALLOW_ORIGINS = env_list("CORS_ALLOW_ORIGINS", "http://localhost:3000")

# In-memory sessions kept before the oldest is evicted
MAX_SESSIONS = env_int("MAX_SESSIONS", 1000)


def configure_logging() -> logging.Logger:
    """Set up the package logger so it emits under Uvicorn.

    - honor LOG_LEVEL env (default INFO)
    - attach a StreamHandler if none present
    - disable propagate to avoid duplicate logs with Uvicorn root handlers
    """
    logger = logging.getLogger("practice_coach")
    try:
        lvl_name = env_str("LOG_LEVEL", "INFO").upper()
        lvl = getattr(logging, lvl_name, logging.INFO)
    except Exception:
        lvl = logging.INFO
    logger.setLevel(lvl)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setLevel(lvl)
        h.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(h)
    logger.propagate = False
    return logger
