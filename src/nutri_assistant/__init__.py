from nutri_assistant.chat.handler import handle_life_stage_selection, handle_user_message, new_conversation

__all__ = ["handle_life_stage_selection", "handle_user_message", "new_conversation"]
