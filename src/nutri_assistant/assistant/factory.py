from __future__ import annotations

from nutri_assistant import config
from nutri_assistant.assistant.archetypes.conversation import ConversationReducer
from nutri_assistant.assistant.archetypes.conversation_store import (
    ConversationStore,
    Scheduler,
    threading_scheduler,
)
from nutri_assistant.assistant.archetypes.intent_resolver import IntentResolver
from nutri_assistant.assistant.archetypes.response_generator import ResponseGenerator
from nutri_assistant.assistant.core.models import ConversationState
from nutri_assistant.assistant.governance.input_guard import InputGuard
from nutri_assistant.assistant.knowledge.content_bank import ContentBank, default_content_bank


_DEFAULT_REDUCER: ConversationReducer | None = None


def load_content_bank() -> ContentBank:
    path = config.content_bank_path()
    if path:
        return ContentBank.from_json_file(path)
    return default_content_bank()


def build_default_reducer() -> ConversationReducer:
    """Build (and memoize) the reducer used by the chat handler."""

    global _DEFAULT_REDUCER
    if _DEFAULT_REDUCER is not None:
        return _DEFAULT_REDUCER

    _DEFAULT_REDUCER = ConversationReducer(
        guard=InputGuard(),
        resolver=IntentResolver(),
        generator=ResponseGenerator(content=load_content_bank()),
    )
    return _DEFAULT_REDUCER


def reset_default_reducer() -> None:
    global _DEFAULT_REDUCER
    _DEFAULT_REDUCER = None


def build_store(
    state: ConversationState | None = None,
    *,
    with_typing_delay: bool = False,
    scheduler: Scheduler | None = None,
) -> ConversationStore:
    """A session store over the default reducer.

    `with_typing_delay` hides each bot reply for ASSISTANT_TYPING_DELAY_MS,
    using `scheduler` or a daemon timer.
    """

    if not with_typing_delay:
        return ConversationStore(build_default_reducer(), state=state)

    return ConversationStore(
        build_default_reducer(),
        state=state,
        scheduler=scheduler or threading_scheduler,
        typing_delay=config.typing_delay_seconds(),
    )
