from __future__ import annotations

import pytest

from nutri_assistant.assistant.archetypes.response_generator import ResponseGenerator, effective_bucket
from nutri_assistant.assistant.core.models import LifeStage, ResolvedIntent
from nutri_assistant.assistant.knowledge.content_bank import DEFAULT_TIPS, ContentBank, ContentBankError


def _small_bank() -> ContentBank:
    return ContentBank.from_mapping(
        {
            "teen": ["teen tip"],
            "adult": ["adult one", "adult two", "adult three"],
            "menopause": ["menopause tip"],
            "general": ["general tip"],
        }
    )


def test_topic_reply_is_returned_verbatim():
    generator = ResponseGenerator(choose=lambda tips: pytest.fail("tip selection should not run"))
    resolved = ResolvedIntent(detected_stage=LifeStage.TEEN, topic_reply="fixed reply", topic="iron")
    assert generator.generate(resolved, LifeStage.ADULT) == "fixed reply"


def test_effective_bucket_order():
    assert effective_bucket(ResolvedIntent(detected_stage=LifeStage.TEEN), LifeStage.ADULT) == "teen"
    assert effective_bucket(ResolvedIntent(), LifeStage.ADULT) == "adult"
    assert effective_bucket(ResolvedIntent(), LifeStage.UNSET) == "general"


def test_unset_stage_falls_back_to_general():
    generator = ResponseGenerator(content=_small_bank())
    assert generator.generate(ResolvedIntent(), LifeStage.UNSET) == "general tip"


def test_detected_stage_overrides_current_stage():
    generator = ResponseGenerator(content=_small_bank())
    assert generator.generate(ResolvedIntent(detected_stage=LifeStage.MENOPAUSE), LifeStage.TEEN) == "menopause tip"


def test_injected_chooser_is_used():
    seen = []

    def pick_last(tips):
        seen.append(tuple(tips))
        return tips[-1]

    generator = ResponseGenerator(content=_small_bank(), choose=pick_last)
    assert generator.generate(ResolvedIntent(), LifeStage.ADULT) == "adult three"
    assert seen == [("adult one", "adult two", "adult three")]


def test_random_tips_cover_the_whole_bucket():
    generator = ResponseGenerator(content=_small_bank())
    replies = {generator.generate(ResolvedIntent(), LifeStage.ADULT) for _ in range(500)}
    assert replies == {"adult one", "adult two", "adult three"}


def test_first_tip_is_deterministic():
    generator = ResponseGenerator()
    for _ in range(5):
        assert generator.first_tip(LifeStage.MENOPAUSE) == DEFAULT_TIPS["menopause"][0]


def test_emptied_bucket_fails_loudly():
    bank = _small_bank()
    object.__setattr__(bank, "tips", {**bank.tips, "adult": ()})
    generator = ResponseGenerator(content=bank)
    with pytest.raises(ContentBankError):
        generator.generate(ResolvedIntent(), LifeStage.ADULT)
