from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .user import User

BOT_COMMAND = "bot_command"


@dataclass(frozen=True)
class MessageEntity:
    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional[User] = None
    language: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MessageEntity":
        return cls(
            type=d.get("type", ""),
            offset=int(d.get("offset", 0)),
            length=int(d.get("length", 0)),
            url=d.get("url"),
            user=User.from_dict(d.get("user")),
            language=d.get("language"),
        )
