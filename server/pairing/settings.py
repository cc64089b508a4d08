"""Configuration helpers for the pairing engine."""
from __future__ import annotations

import logging
import os
from typing import Final, Optional

from dotenv import load_dotenv

from utils import parse_optional_int, parse_positive_int

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MENTOR_CAPACITY: Final[int] = 2
DEFAULT_GAMES_WEIGHT: Final[int] = 1
MIN_GAMES_WEIGHT: Final[int] = 1
MAX_GAMES_WEIGHT: Final[int] = 2


def read_mentor_capacity(raw: Optional[str] = None) -> int:
    value = os.getenv("MENTOR_CAPACITY") if raw is None else raw
    if value is None or not str(value).strip():
        return DEFAULT_MENTOR_CAPACITY
    capacity = parse_positive_int(value)
    if capacity is None:
        logger.warning(
            "Ignoring invalid MENTOR_CAPACITY=%r, using %s", value, DEFAULT_MENTOR_CAPACITY
        )
        return DEFAULT_MENTOR_CAPACITY
    return capacity


def read_games_weight(raw: Optional[str] = None) -> int:
    value = os.getenv("GAMES_WEIGHT") if raw is None else raw
    weight = parse_optional_int(value)
    if weight is None:
        return DEFAULT_GAMES_WEIGHT
    if not MIN_GAMES_WEIGHT <= weight <= MAX_GAMES_WEIGHT:
        clamped = min(max(weight, MIN_GAMES_WEIGHT), MAX_GAMES_WEIGHT)
        logger.warning("GAMES_WEIGHT=%s is out of range, clamped to %s", weight, clamped)
        return clamped
    return weight


MENTOR_CAPACITY: Final[int] = read_mentor_capacity()
GAMES_WEIGHT: Final[int] = read_games_weight()
PROFILE_STORE: Final[str] = (os.getenv("PROFILE_STORE") or "postgres").strip().lower()

__all__ = [
    "DEFAULT_MENTOR_CAPACITY",
    "DEFAULT_GAMES_WEIGHT",
    "MENTOR_CAPACITY",
    "GAMES_WEIGHT",
    "PROFILE_STORE",
    "read_mentor_capacity",
    "read_games_weight",
]
