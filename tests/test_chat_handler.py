from __future__ import annotations

import pytest

from nutri_assistant import handle_life_stage_selection, handle_user_message, new_conversation
from nutri_assistant.assistant.knowledge.content_bank import DEFAULT_TIPS, GREETING_TEXT, TOPIC_RULES


def test_new_conversation_payload():
    payload = new_conversation()
    assert payload["life_stage"] == "unset"
    assert payload["turns"] == [{"id": 1, "text": GREETING_TEXT, "sender": "bot"}]


def test_message_round_trips_through_payload():
    reply, payload = handle_user_message(new_conversation(), "What about calcium?")

    assert reply == TOPIC_RULES[1].reply
    assert [t["sender"] for t in payload["turns"]] == ["bot", "user", "bot"]

    reply, payload = handle_user_message(payload, "I'm a teen")
    assert reply in DEFAULT_TIPS["teen"]
    assert payload["life_stage"] == "teen"
    assert len(payload["turns"]) == 5
    assert [t["id"] for t in payload["turns"]] == [1, 2, 3, 4, 5]


def test_missing_payload_starts_a_new_conversation():
    reply, payload = handle_user_message(None, "bye")
    assert payload["turns"][0]["text"] == GREETING_TEXT
    assert reply == payload["turns"][-1]["text"]


def test_blank_message_changes_nothing():
    start = new_conversation()
    reply, payload = handle_user_message(start, "   ")
    assert reply is None
    assert payload == start


def test_debug_payload():
    reply, payload, dbg = handle_user_message(new_conversation(), "young and tired", debug=True)

    assert reply == TOPIC_RULES[2].reply
    assert dbg == {
        "life_stage_before": "unset",
        "life_stage": "teen",
        "detected_stage": "teen",
        "topic": "energy",
        "tip_bucket": None,
    }

    _reply, _payload, dbg = handle_user_message(payload, "pizza", debug=True)
    assert dbg["topic"] is None
    assert dbg["detected_stage"] is None
    assert dbg["tip_bucket"] == "teen"


def test_life_stage_selection():
    reply, payload = handle_life_stage_selection(new_conversation(), "menopause")
    assert reply == DEFAULT_TIPS["menopause"][0]
    assert payload["life_stage"] == "menopause"

    reply, again = handle_life_stage_selection(payload, "teen")
    assert reply is None
    assert again["life_stage"] == "menopause"


@pytest.mark.parametrize("stage", ["unset", "elderly"])
def test_invalid_life_stage_selection(stage):
    with pytest.raises(ValueError):
        handle_life_stage_selection(new_conversation(), stage)


def test_payload_with_no_turns_keeps_its_stage():
    reply, payload = handle_user_message({"turns": [], "life_stage": "menopause", "next_id": 4}, "pizza")
    assert reply in DEFAULT_TIPS["menopause"]
    assert payload["life_stage"] == "menopause"
    assert [t["id"] for t in payload["turns"]] == [4, 5]
