from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .message import Message
from .user import User


@dataclass(frozen=True)
class CallbackQuery:
    id: str
    from_user: Optional[User]
    message: Optional[Message] = None
    chat_instance: Optional[str] = None
    data: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> Optional["CallbackQuery"]:
        if not d:
            return None
        return cls(
            id=d.get("id"),
            from_user=User.from_dict(d.get("from")),
            message=Message.from_dict(d.get("message")),
            chat_instance=d.get("chat_instance"),
            data=d.get("data"),
            raw=d,
        )
