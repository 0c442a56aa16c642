from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .chat import Chat
from .message_entity import MessageEntity
from .photo_size import PhotoSize
from .user import User

_KNOWN = ("message_id", "date", "chat", "from", "text", "caption", "entities", "photo")


@dataclass(frozen=True)
class Message:
    message_id: int
    date: Optional[int]
    chat: Optional[Chat]
    from_user: Optional[User] = None
    text: Optional[str] = None
    caption: Optional[str] = None
    entities: List[MessageEntity] = field(default_factory=list)
    photo: List[PhotoSize] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> Optional["Message"]:
        if not d:
            return None
        return cls(
            message_id=d.get("message_id"),
            date=d.get("date"),
            chat=Chat.from_dict(d.get("chat")),
            from_user=User.from_dict(d.get("from")),
            text=d.get("text"),
            caption=d.get("caption"),
            entities=[MessageEntity.from_dict(e) for e in d.get("entities") or []],
            photo=[PhotoSize.from_dict(p) for p in d.get("photo") or []],
            extra={k: v for k, v in d.items() if k not in _KNOWN},
            raw=d,
        )
