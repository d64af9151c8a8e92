import logging

from dotenv import load_dotenv

import promptflow.config as config

load_dotenv()

default_level = config.LOGGING_LEVEL or "INFO"
logging.basicConfig(
    level=default_level,
    format="%(asctime)s [%(levelname)s] [%(filename)s:%(lineno)d - %(funcName)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("promptflow")

# Shortcut aliases
debug = logger.debug
info = logger.info
warning = logger.warning
error = logger.error
exception = logger.exception


def get_logger():
    return logger


def redact_key(api_key: str) -> str:
    """Render an API key for logs without leaking it."""
    if not api_key:
        return "<missing>"
    if len(api_key) <= 8:
        return "***"
    return f"{api_key[:3]}***{api_key[-2:]}"
