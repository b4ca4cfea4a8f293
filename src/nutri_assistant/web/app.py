import logging
import os
from pathlib import Path

from flask import Flask, jsonify, render_template, request, session

from nutri_assistant import config, handle_life_stage_selection, handle_user_message, new_conversation
from nutri_assistant.assistant.governance.input_guard import InputGuard

logger = logging.getLogger(__name__)

LIFE_STAGE_CHOICES = ("teen", "adult", "menopause")

_input_guard = InputGuard()


# maximum character limit; the kept prefix is passed on unedited
def _truncate(text: str, limit: int) -> str:
    if text is None:
        return ""
    return str(text)[: max(0, limit)]


def _get_conversation() -> dict:
    conversation = session.get("conversation")
    if not isinstance(conversation, dict) or "life_stage" not in conversation:
        conversation = new_conversation()
        session["conversation"] = conversation
    return conversation


# keeps the cookie-backed session small; never leaves a reply without its question
def _trim_turns(turns: list, limit: int) -> list:
    if limit <= 0 or len(turns) <= limit:
        return turns
    # a question and its reply always survive
    limit = max(limit, 2)
    kept = turns[-limit:]
    while kept and kept[0].get("sender") == "bot":
        kept = kept[1:]
    return kept


def _store_conversation(conversation: dict) -> None:
    conversation["turns"] = _trim_turns(conversation.get("turns", []), config.max_session_turns())
    session["conversation"] = conversation
    session.modified = True


def _state_payload(reply, conversation: dict) -> dict:
    return {
        "ok": True,
        "reply": reply,
        "life_stage": conversation.get("life_stage"),
        "turns": conversation.get("turns", []),
    }


def create_app() -> Flask:
    # Get the directory where this file is located
    web_dir = Path(__file__).parent

    app = Flask(
        __name__,
        template_folder=str(web_dir / "templates"),
    )

    # Session cookie signing key.
    # For local dev only: fallback to a constant if not set.
    app.secret_key = os.getenv("FLASK_SECRET_KEY", "dev-secret-key-change-me")

    @app.get("/")
    def index():
        conversation = _get_conversation()
        return render_template(
            "index.html",
            chat=conversation["turns"],
            life_stage=conversation.get("life_stage"),
            stage_choices=LIFE_STAGE_CHOICES,
        )

# receives user input, cleans it, runs it through the assistant, returns bot reply
    @app.post("/api/chat")
    def api_chat():
        payload = request.get_json(silent=True) or {}
        message = payload.get("message", "")
        debug = bool(payload.get("debug", False))

        message = _truncate(message, config.max_message_chars())

        decision = _input_guard.validate_input(message)
        if not decision.ok:
            return jsonify({"ok": False, "error": decision.error}), 400

        try:
            conversation = _get_conversation()
            if debug:
                reply, conversation, dbg = handle_user_message(conversation, message, debug=True)
                _store_conversation(conversation)
                return jsonify({**_state_payload(reply, conversation), "debug": dbg})

            reply, conversation = handle_user_message(conversation, message)
            _store_conversation(conversation)
            return jsonify(_state_payload(reply, conversation))

        except Exception as e:
            logger.exception("chat request failed")
            return jsonify({"ok": False, "error": f"Server error: {e}"}), 500

# quick-pick life-stage buttons, only meaningful while the stage is unset
    @app.post("/api/life-stage")
    def api_life_stage():
        payload = request.get_json(silent=True) or {}
        stage = str(payload.get("stage") or "").strip().lower()

        if stage not in LIFE_STAGE_CHOICES:
            return jsonify({"ok": False, "error": f"Unknown life stage: {stage!r}"}), 400

        try:
            reply, conversation = handle_life_stage_selection(_get_conversation(), stage)
            _store_conversation(conversation)
            return jsonify(_state_payload(reply, conversation))

        except Exception as e:
            logger.exception("life-stage selection failed")
            return jsonify({"ok": False, "error": f"Server error: {e}"}), 500

# starts a fresh conversation with the greeting only
    @app.post("/api/clear")
    def api_clear():
        _store_conversation(new_conversation())
        return jsonify({"ok": True})

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = create_app()

    host = os.getenv("HOST", "127.0.0.1")
    port = config._get_int_env("PORT", 5000)
    debug = os.getenv("FLASK_DEBUG", "").strip() == "1"

    app.run(host=host, port=port, debug=debug)
