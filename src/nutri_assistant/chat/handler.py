"""Chat handler: run one user action against a serialized conversation."""

from __future__ import annotations

from typing import Any

from nutri_assistant.assistant.archetypes.response_generator import effective_bucket
from nutri_assistant.assistant.core.models import ConversationState, LifeStage, Sender
from nutri_assistant.assistant.factory import build_store


def _load(payload: dict[str, Any] | None) -> ConversationState | None:
    if not isinstance(payload, dict) or "life_stage" not in payload:
        return None
    return ConversationState.from_dict(payload)


def _last_bot_text(state: ConversationState) -> str | None:
    for turn in reversed(state.turns):
        if turn.sender == Sender.BOT:
            return turn.text
    return None


def new_conversation() -> dict[str, Any]:
    return build_store().state.to_dict()


def handle_user_message(payload: dict[str, Any] | None, user_input: str, debug: bool = False):
    """Apply a free-text message to a session payload.

    - If `debug` is False: returns `(reply, payload)`.
    - If `debug` is True: returns `(reply, payload, dict)`.

    `reply` is None when the message was blank and nothing changed.
    """

    store = build_store(_load(payload))
    before = store.state
    store.submit(user_input or "")
    state = store.state

    reply = _last_bot_text(state) if state is not before else None

    if not debug:
        return reply, state.to_dict()

    intent = state.last_intent if state is not before else None
    dbg: dict[str, Any] = {
        "life_stage_before": before.life_stage.value,
        "life_stage": state.life_stage.value,
        "detected_stage": intent.detected_stage.value if intent and intent.detected_stage else None,
        "topic": intent.topic if intent else None,
        "tip_bucket": (
            effective_bucket(intent, before.life_stage) if intent and intent.topic_reply is None else None
        ),
    }
    return reply, state.to_dict(), dbg


def handle_life_stage_selection(payload: dict[str, Any] | None, stage: str):
    """Apply a quick-pick life-stage choice; returns `(reply, payload)`.

    Raises ValueError for unknown stages and for `unset`. `reply` is None
    when a stage was already chosen.
    """

    store = build_store(_load(payload))
    before = store.state
    store.select_life_stage(LifeStage(stage))
    state = store.state

    reply = _last_bot_text(state) if state is not before else None
    return reply, state.to_dict()
