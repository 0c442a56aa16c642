"""Shared fixtures for the gramvibe test suite."""

from __future__ import annotations

from typing import Any

import pytest

from gramvibe import Bot, Update

from .factories import TOKEN, message_dict


@pytest.fixture
def make_update():
    """Factory for message updates: make_update(7, text="/start", entities=[...])."""

    def _make(update_id: int = 1, **kwargs: Any) -> Update:
        return Update.from_dict(message_dict(update_id, **kwargs))

    return _make


@pytest.fixture
def bot():
    b = Bot(TOKEN, retry_delay=0.01)
    yield b
    b.close()
