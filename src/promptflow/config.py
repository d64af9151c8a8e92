import os

from dotenv import load_dotenv

# Load from .env if it exists (useful for local development)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


LOGGING_LEVEL = os.getenv("LOGGING_LEVEL", "").upper()

# Verbose request/response logging for the chat client (never logs API keys)
LLM_DEBUG = os.getenv("PROMPTFLOW_LLM_DEBUG", "").strip().lower() in (
    "1",
    "true",
    "yes",
    "on",
)

# --- CONFIG --- chat transport
DEFAULT_TIMEOUT_S = _env_float("PROMPTFLOW_TIMEOUT_S", 60.0)
LLM_RETRIES = _env_int("PROMPTFLOW_LLM_RETRIES", 2)
LLM_MIN_DELAY_S = _env_float("PROMPTFLOW_LLM_MIN_DELAY_S", 0.5)
LLM_MAX_DELAY_S = _env_float("PROMPTFLOW_LLM_MAX_DELAY_S", 8.0)
RETRY_AFTER_CAP_S = 60.0
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

# --- CONFIG --- JSON repair pass
REPAIR_TEMPERATURE = _env_float("PROMPTFLOW_REPAIR_TEMPERATURE", 0.0)
REPAIR_MAX_TOKENS = _env_int("PROMPTFLOW_REPAIR_MAX_TOKENS", 1200)

# === CONFIGURATION === polishing
DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = {
    "en": "English",
    "zh-CN": "Simplified Chinese (简体中文)",
}
