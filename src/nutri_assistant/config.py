from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MAX_MESSAGE_CHARS = 2000
DEFAULT_MAX_SESSION_TURNS = 12
DEFAULT_TYPING_DELAY_MS = 500


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def max_message_chars() -> int:
    return _get_int_env("CHAT_MAX_MESSAGE_CHARS", DEFAULT_MAX_MESSAGE_CHARS)


def max_session_turns() -> int:
    return _get_int_env("CHAT_MAX_TURNS", DEFAULT_MAX_SESSION_TURNS)


def typing_delay_seconds() -> float:
    return max(0, _get_int_env("ASSISTANT_TYPING_DELAY_MS", DEFAULT_TYPING_DELAY_MS)) / 1000.0


def content_bank_path() -> str | None:
    # Optional JSON file that replaces the built-in tip tables.
    path = os.getenv("NUTRI_CONTENT_BANK_PATH", "").strip()
    return path or None
