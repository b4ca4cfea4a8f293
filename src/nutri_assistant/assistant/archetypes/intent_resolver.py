from __future__ import annotations

import logging
from dataclasses import dataclass

from nutri_assistant.assistant.core.models import LifeStage, ResolvedIntent, TopicRule
from nutri_assistant.assistant.knowledge.content_bank import SMALL_TALK_RULES, STAGE_MARKERS, TOPIC_RULES

logger = logging.getLogger(__name__)


@dataclass
class IntentResolver:
    """Rule-based resolver: plain lower-cased substring scans, no tokenization.

    Stage detection and topic matching are independent; both may fire for
    the same utterance.
    """

    stage_markers: tuple[tuple[LifeStage, tuple[str, ...]], ...] = STAGE_MARKERS
    topic_rules: tuple[TopicRule, ...] = TOPIC_RULES
    small_talk_rules: tuple[TopicRule, ...] = SMALL_TALK_RULES

    def resolve(self, utterance: str, current_stage: LifeStage) -> ResolvedIntent:
        lowered = (utterance or "").lower()

        detected = self.detect_stage(lowered)
        rule = self._first_match(self.topic_rules, lowered) or self._first_match(self.small_talk_rules, lowered)

        logger.debug(
            "resolved utterance: current=%s detected=%s topic=%s",
            current_stage.value,
            detected.value if detected else None,
            rule.name if rule else None,
        )

        if rule is None:
            return ResolvedIntent(detected_stage=detected)
        return ResolvedIntent(detected_stage=detected, topic_reply=rule.reply, topic=rule.name)

    def detect_stage(self, lowered: str) -> LifeStage | None:
        for stage, markers in self.stage_markers:
            if any(marker in lowered for marker in markers):
                return stage
        return None

    @staticmethod
    def _first_match(rules: tuple[TopicRule, ...], lowered: str) -> TopicRule | None:
        for rule in rules:
            if rule.matches(lowered):
                return rule
        return None
