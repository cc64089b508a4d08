"""Application configuration helpers."""
from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from dotenv import load_dotenv


def configure_logging(default_level: int = logging.INFO) -> int:
    """Configure root logging using the ``LOG_LEVEL`` environment variable.

    Only installs a handler when the root logger has none, so test suites
    and embedding servers keep their own configuration.
    """

    load_dotenv()
    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    level: int = getattr(logging, level_name, default_level)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return level


def _positive_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_identity_verify_url() -> Optional[str]:
    """Return the identity provider's token verification endpoint if configured."""

    value = os.getenv("IDENTITY_VERIFY_URL")
    if value and value.strip():
        return value.strip()
    return None


def get_identity_static_tokens() -> Dict[str, str]:
    """Parse ``IDENTITY_STATIC_TOKENS`` (``token:uid,token:uid``)."""

    tokens: Dict[str, str] = {}
    for chunk in (os.getenv("IDENTITY_STATIC_TOKENS") or "").split(","):
        token, sep, uid = chunk.partition(":")
        if sep and token.strip() and uid.strip():
            tokens[token.strip()] = uid.strip()
    return tokens


def get_identity_timeout() -> float:
    return _positive_float("IDENTITY_TIMEOUT", 5.0)


def get_identity_ready_timeout() -> float:
    return _positive_float("IDENTITY_READY_TIMEOUT", 10.0)
