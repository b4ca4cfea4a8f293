from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from nutri_assistant.assistant.archetypes.intent_resolver import IntentResolver
from nutri_assistant.assistant.archetypes.response_generator import ResponseGenerator
from nutri_assistant.assistant.core.models import (
    Action,
    ConversationState,
    LifeStage,
    SelectLifeStage,
    Sender,
    SubmitUtterance,
    Turn,
)
from nutri_assistant.assistant.governance.input_guard import InputGuard
from nutri_assistant.assistant.knowledge.content_bank import GREETING_TEXT

logger = logging.getLogger(__name__)


def initial_state(greeting: str = GREETING_TEXT) -> ConversationState:
    """A fresh session: one seeded bot greeting and no life-stage."""

    return ConversationState(turns=(Turn(id=1, text=greeting, sender=Sender.BOT),), next_id=2)


def _append(state: ConversationState, text: str, sender: Sender) -> ConversationState:
    turn = Turn(id=state.next_id, text=text, sender=sender)
    return replace(state, turns=state.turns + (turn,), next_id=state.next_id + 1)


@dataclass
class ConversationReducer:
    """`(state, action) -> state` for one chat session.

    Never mutates its input; a rejected action returns the very same state
    object. Life-stage only ever moves away from `unset`.
    """

    guard: InputGuard
    resolver: IntentResolver
    generator: ResponseGenerator

    def reduce(self, state: ConversationState, action: Action) -> ConversationState:
        if isinstance(action, SubmitUtterance):
            return self._submit(state, action.text)
        if isinstance(action, SelectLifeStage):
            return self._select(state, action.stage)
        raise TypeError(f"unknown action: {action!r}")

    def _submit(self, state: ConversationState, text: str) -> ConversationState:
        decision = self.guard.validate_input(text)
        if not decision.ok:
            return state

        state = _append(state, text, Sender.USER)

        resolved = self.resolver.resolve(text, state.life_stage)
        reply = self.generator.generate(resolved, state.life_stage)

        if resolved.detected_stage is not None and resolved.detected_stage != state.life_stage:
            logger.debug("life-stage %s -> %s", state.life_stage.value, resolved.detected_stage.value)
            state = replace(state, life_stage=resolved.detected_stage)

        state = _append(state, reply, Sender.BOT)
        return replace(state, last_intent=resolved)

    def _select(self, state: ConversationState, stage: LifeStage) -> ConversationState:
        stage = LifeStage(stage)
        if stage == LifeStage.UNSET:
            raise ValueError("cannot select the 'unset' life-stage")

        # The quick-pick is only offered before a stage is known.
        if state.life_stage != LifeStage.UNSET:
            return state

        tip = self.generator.first_tip(stage)
        state = _append(state, f"I'm interested in nutrition for {stage.value}s", Sender.USER)
        state = _append(state, tip, Sender.BOT)
        return replace(state, life_stage=stage, last_intent=None)
