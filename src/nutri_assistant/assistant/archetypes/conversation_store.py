from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from nutri_assistant.assistant.archetypes.conversation import ConversationReducer, initial_state
from nutri_assistant.assistant.core.models import (
    Action,
    ConversationState,
    LifeStage,
    SelectLifeStage,
    SubmitUtterance,
    Turn,
)

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]


def threading_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run `callback` once after `delay` seconds on a daemon timer thread."""

    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class ConversationStore:
    """Owns one session's conversation and drives the reducer.

    With a scheduler and a positive `typing_delay`, the bot turn produced by
    `submit` stays hidden until the scheduled callback fires. Any later
    action reveals it first, so a user turn and its bot turn are always
    adjacent. `close()` drops a bot turn that was never revealed.
    """

    def __init__(
        self,
        reducer: ConversationReducer,
        state: ConversationState | None = None,
        scheduler: Scheduler | None = None,
        typing_delay: float = 0.0,
    ) -> None:
        self._reducer = reducer
        self._state = state if state is not None else initial_state()
        self._scheduler = scheduler
        self._typing_delay = typing_delay
        self._hidden_turn_id: int | None = None
        self._stage_before_reply = self._state.life_stage
        self._closed = False
        self._lock = threading.RLock()

    @property
    def state(self) -> ConversationState:
        with self._lock:
            return self._state

    @property
    def life_stage(self) -> LifeStage:
        """The stage the visible transcript has reached.

        A stage detected by a still-hidden reply is reported once that reply
        is revealed.
        """

        with self._lock:
            if self._hidden_turn_id is not None:
                return self._stage_before_reply
            return self._state.life_stage

    @property
    def transcript(self) -> list[Turn]:
        with self._lock:
            return self._visible_turns()

    @property
    def has_pending_reply(self) -> bool:
        with self._lock:
            return self._hidden_turn_id is not None

    def submit(self, text: str) -> list[Turn]:
        return self._dispatch(SubmitUtterance(text=text), delay_reply=True)

    def select_life_stage(self, stage: LifeStage | str) -> list[Turn]:
        return self._dispatch(SelectLifeStage(stage=LifeStage(stage)), delay_reply=False)

    def close(self) -> None:
        with self._lock:
            if self._hidden_turn_id is not None:
                logger.debug("dropping undelivered bot turn %s", self._hidden_turn_id)
                self._state = replace(self._state, turns=tuple(self._visible_turns()))
                self._hidden_turn_id = None
            self._closed = True

    def _dispatch(self, action: Action, *, delay_reply: bool) -> list[Turn]:
        with self._lock:
            if self._closed:
                raise RuntimeError("conversation is closed")

            self._hidden_turn_id = None
            before = self._state
            self._state = self._reducer.reduce(before, action)

            changed = self._state is not before
            if changed and delay_reply and self._scheduler is not None and self._typing_delay > 0:
                bot_turn_id = self._state.turns[-1].id
                self._hidden_turn_id = bot_turn_id
                self._stage_before_reply = before.life_stage
                self._scheduler(self._typing_delay, lambda: self._reveal(bot_turn_id))

            return self._visible_turns()

    def _reveal(self, turn_id: int) -> None:
        with self._lock:
            if self._hidden_turn_id == turn_id:
                self._hidden_turn_id = None

    def _visible_turns(self) -> list[Turn]:
        return [t for t in self._state.turns if t.id != self._hidden_turn_id]
