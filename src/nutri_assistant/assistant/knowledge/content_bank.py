from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from nutri_assistant.assistant.core.models import GENERAL_BUCKET, LifeStage, TopicRule

logger = logging.getLogger(__name__)


class ContentBankError(RuntimeError):
    """Raised when the tip tables break the non-empty bucket guarantee."""


GREETING_TEXT = (
    "Hi there! I'm your nutrition assistant. I can provide tips specific to your life stage "
    "(teen, adult, or menopause). How can I help you today?"
)

DEFAULT_TIPS: dict[str, tuple[str, ...]] = {
    LifeStage.TEEN.value: (
        "Calcium is crucial during adolescence for bone development. Aim for 1,300mg daily from dairy, "
        "fortified plant milks, or leafy greens.",
        "Iron needs increase during teen years, especially once menstruation begins. Include lean meats, "
        "beans, and leafy greens in your diet.",
        "Vitamin D supports calcium absorption. Consider getting 15 minutes of sun exposure or consuming "
        "fortified foods.",
        "Limit processed foods and focus on whole foods for stable energy and mood throughout the day.",
        "Regular meals and snacks help support growth spurts and prevent energy crashes during this "
        "high-growth phase.",
    ),
    LifeStage.ADULT.value: (
        "During your period, iron-rich foods like lean meats, beans, and dark leafy greens can help "
        "replace lost iron.",
        "Magnesium-rich foods (dark chocolate, nuts, seeds) may help reduce menstrual cramps and PMS symptoms.",
        "B vitamins from whole grains and proteins support energy production during times of fatigue.",
        "Omega-3 fatty acids from fatty fish, flaxseeds, and walnuts may help reduce inflammation and "
        "period pain.",
        "A balanced diet with adequate protein (0.8g per kg body weight) supports muscle maintenance and "
        "hormone production.",
    ),
    LifeStage.MENOPAUSE.value: (
        "Phytoestrogens from soy foods, flaxseeds, and sesame seeds may help manage hormonal fluctuations.",
        "Calcium and vitamin D become increasingly important as bone density risks increase. Aim for "
        "1200mg calcium daily.",
        "Heart-healthy foods like fatty fish, olive oil, nuts, and plenty of fruits and vegetables should "
        "be dietary priorities.",
        "Protein needs increase to help preserve muscle mass. Aim for 1.0-1.2g per kg of body weight daily.",
        "Staying well-hydrated supports skin elasticity and overall health as natural estrogen declines.",
    ),
    GENERAL_BUCKET: (
        "Stay hydrated! Aim for at least 8 glasses of water daily.",
        "Include protein with every meal to support hormone production and stable energy.",
        "Eat a rainbow of fruits and vegetables to ensure a wide range of nutrients.",
        "Limit processed foods and added sugars which can contribute to inflammation.",
        "Healthy fats from avocados, nuts, seeds, and olive oil support hormone production.",
    ),
}

# Checked in this order; the first group with a hit wins ("young adult" -> teen).
STAGE_MARKERS: tuple[tuple[LifeStage, tuple[str, ...]], ...] = (
    (LifeStage.TEEN, ("teen", "adolesc", "young")),
    (LifeStage.MENOPAUSE, ("menopause", "climacteric", "50s", "hot flash")),
    (LifeStage.ADULT, ("period", "cycle", "pms", "20s", "30s", "adult")),
)

TOPIC_RULES: tuple[TopicRule, ...] = (
    TopicRule(
        name="iron",
        keywords=frozenset({"iron", "anemia"}),
        reply=(
            "Iron is essential for women, especially during menstruation. Good sources include lean red "
            "meat, beans, lentils, tofu, and fortified cereals. Pairing with vitamin C foods improves "
            "absorption. Consider supplements if your levels are low, but consult with a healthcare "
            "provider first."
        ),
    ),
    TopicRule(
        name="calcium",
        keywords=frozenset({"calcium", "bone"}),
        reply=(
            "Calcium is crucial for bone health throughout a woman's life. Aim for 1000-1200mg daily from "
            "dairy, fortified plant milks, tofu, sardines, and leafy greens. Vitamin D helps with "
            "absorption, so consider some sun exposure or supplements, especially during winter."
        ),
    ),
    TopicRule(
        name="energy",
        keywords=frozenset({"energy", "fatigue", "tired"}),
        reply=(
            "Low energy can be common during different life stages. Focus on iron-rich foods, B-vitamins "
            "from whole grains, adequate protein, and staying hydrated. Regular meal timing helps maintain "
            "stable blood sugar. If fatigue persists, consider checking for iron, B12, or thyroid issues "
            "with your healthcare provider."
        ),
    ),
    TopicRule(
        name="pms",
        keywords=frozenset({"pms", "cramps", "pain"}),
        reply=(
            "For PMS and menstrual discomfort, increase magnesium from dark chocolate, nuts, and seeds. "
            "Reduce salt, caffeine, and alcohol. Anti-inflammatory foods like fatty fish, turmeric, and "
            "berries may help. Some women find relief from evening primrose oil or chasteberry "
            "supplements, but research is mixed."
        ),
    ),
)

SMALL_TALK_RULES: tuple[TopicRule, ...] = (
    TopicRule(
        name="greeting",
        keywords=frozenset({"hello", "hi "}),
        exact=frozenset({"hi"}),
        reply=(
            "Hello! I'm your nutrition assistant. Would you like tips specific to a certain life stage? "
            "(teen, adult, or menopause)"
        ),
    ),
    TopicRule(
        name="thanks",
        keywords=frozenset({"thank"}),
        reply="You're welcome! Is there anything else you'd like to know about nutrition?",
    ),
    TopicRule(
        name="farewell",
        keywords=frozenset({"bye", "goodbye"}),
        reply=(
            "Take care! Remember that nutrition is a journey, not a destination. Small, consistent changes "
            "make the biggest difference."
        ),
    ),
)

_REQUIRED_BUCKETS = (LifeStage.TEEN.value, LifeStage.ADULT.value, LifeStage.MENOPAUSE.value, GENERAL_BUCKET)


@dataclass(frozen=True)
class ContentBank:
    """Read-only tip lists keyed by life-stage plus the `general` fallback.

    Construction fails with ContentBankError unless every stage bucket and
    `general` hold at least one tip, so tip selection can never come up empty.
    """

    tips: Mapping[str, tuple[str, ...]]

    def __post_init__(self) -> None:
        if LifeStage.UNSET.value in self.tips:
            raise ContentBankError("'unset' is not a tip bucket")
        for bucket in _REQUIRED_BUCKETS:
            entries = self.tips.get(bucket)
            if not entries:
                raise ContentBankError(f"tip bucket '{bucket}' is missing or empty")
            if not all(isinstance(e, str) and e.strip() for e in entries):
                raise ContentBankError(f"tip bucket '{bucket}' contains blank entries")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Sequence[str]]) -> ContentBank:
        return cls(tips={str(k): tuple(v) for k, v in raw.items()})

    @classmethod
    def from_json_file(cls, path: str | Path) -> ContentBank:
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ContentBankError(f"cannot read content bank {path}: {e}") from e
        if not isinstance(raw, dict) or not all(isinstance(v, list) for v in raw.values()):
            raise ContentBankError(f"content bank {path} must map bucket names to lists of tips")

        bank = cls.from_mapping(raw)
        logger.info("Loaded content bank from %s (%d buckets)", path, len(bank.tips))
        return bank

    def tips_for(self, bucket: LifeStage | str) -> tuple[str, ...]:
        key = bucket.value if isinstance(bucket, LifeStage) else bucket
        entries = self.tips.get(key)
        if not entries:
            raise ContentBankError(f"no tips available for '{key}'")
        return entries


def default_content_bank() -> ContentBank:
    return ContentBank(tips=dict(DEFAULT_TIPS))
