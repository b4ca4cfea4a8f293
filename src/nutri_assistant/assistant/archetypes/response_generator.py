from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from nutri_assistant.assistant.core.models import GENERAL_BUCKET, LifeStage, ResolvedIntent
from nutri_assistant.assistant.knowledge.content_bank import ContentBank, default_content_bank

Chooser = Callable[[Sequence[str]], str]


def effective_bucket(resolved: ResolvedIntent, current_stage: LifeStage) -> str:
    if resolved.detected_stage is not None:
        return resolved.detected_stage.value
    if current_stage != LifeStage.UNSET:
        return current_stage.value
    return GENERAL_BUCKET


@dataclass
class ResponseGenerator:
    """Formats the bot reply for a resolved intent.

    Topic replies are returned verbatim. Otherwise a tip is drawn from the
    bucket for the effective stage using `choose`, which defaults to
    `random.choice` and can be swapped for a deterministic picker in tests.
    """

    content: ContentBank = field(default_factory=default_content_bank)
    choose: Chooser = random.choice

    def generate(self, resolved: ResolvedIntent, current_stage: LifeStage) -> str:
        if resolved.topic_reply is not None:
            return resolved.topic_reply

        tips = self.content.tips_for(effective_bucket(resolved, current_stage))
        return self.choose(tips)

    def first_tip(self, stage: LifeStage) -> str:
        return self.content.tips_for(stage)[0]
