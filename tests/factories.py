"""Raw update builders shared by the tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

TOKEN = "123456:TEST_TOKEN_FOR_TESTING"
API_URL = f"https://api.telegram.org/bot{TOKEN}/"


def message_dict(
    update_id: int = 1,
    text: Optional[str] = "hello",
    user_id: Optional[int] = 42,
    chat_type: str = "private",
    entities: Optional[List[Dict[str, Any]]] = None,
    kind: str = "message",
) -> Dict[str, Any]:
    msg: Dict[str, Any] = {
        "message_id": update_id * 10,
        "date": 1700000000,
        "chat": {"id": 1000, "type": chat_type},
    }
    if user_id is not None:
        msg["from"] = {"id": user_id, "is_bot": False, "first_name": "Test", "username": "tester"}
    if text is not None:
        msg["text"] = text
    if entities is not None:
        msg["entities"] = entities
    return {"update_id": update_id, kind: msg}


def command_dict(text: str, update_id: int = 1, length: Optional[int] = None) -> Dict[str, Any]:
    if length is None:
        length = len(text.split()[0])
    return message_dict(update_id, text=text, entities=[{"type": "bot_command", "offset": 0, "length": length}])


def callback_dict(update_id: int = 1, user_id: int = 42, data: str = "btn") -> Dict[str, Any]:
    return {
        "update_id": update_id,
        "callback_query": {
            "id": f"cb{update_id}",
            "from": {"id": user_id, "is_bot": False, "first_name": "Test"},
            "chat_instance": "ci",
            "data": data,
        },
    }
