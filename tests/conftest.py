from __future__ import annotations

import pytest

from nutri_assistant.assistant.factory import reset_default_reducer


@pytest.fixture(autouse=True)
def _fresh_default_reducer():
    reset_default_reducer()
    yield
    reset_default_reducer()
