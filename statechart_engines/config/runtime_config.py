"""Runtime configuration helpers for the statechart engines."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_MAX_SIZE = 50
DEFAULT_TEXT_DEBOUNCE_MS = 500
DEFAULT_MOVE_DEBOUNCE_MS = 300
DEFAULT_HISTORY_SETTLE_MS = 100


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def _get_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring negative %s=%r, using %s", name, raw, default)
        return default
    return value


def get_env() -> Optional[str]:
    return _get_env("ENV") or _get_env("APP_ENV")


def get_history_max_size() -> int:
    return max(1, _get_int("EDITOR_HISTORY_MAX_SIZE", DEFAULT_HISTORY_MAX_SIZE))


def get_text_debounce_ms() -> int:
    return _get_int("EDITOR_TEXT_DEBOUNCE_MS", DEFAULT_TEXT_DEBOUNCE_MS)


def get_move_debounce_ms() -> int:
    return _get_int("EDITOR_MOVE_DEBOUNCE_MS", DEFAULT_MOVE_DEBOUNCE_MS)


def get_history_settle_ms() -> int:
    return _get_int("EDITOR_HISTORY_SETTLE_MS", DEFAULT_HISTORY_SETTLE_MS)


def config_snapshot() -> Dict[str, Any]:
    return {
        "env": get_env() or "dev",
        "history_max_size": get_history_max_size(),
        "text_debounce_ms": get_text_debounce_ms(),
        "move_debounce_ms": get_move_debounce_ms(),
        "history_settle_ms": get_history_settle_ms(),
    }
