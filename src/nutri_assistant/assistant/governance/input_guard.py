from __future__ import annotations

from dataclasses import dataclass


@dataclass
class InputDecision:
    ok: bool
    error: str | None = None


class InputGuard:
    """The assistant's only validation rule: blank utterances are ignored."""

    def validate_input(self, text: str | None) -> InputDecision:
        if not (text or "").strip():
            return InputDecision(ok=False, error="Message is empty.")
        return InputDecision(ok=True)
