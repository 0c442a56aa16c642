from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

CHAT_TYPE_PRIVATE = "private"
CHAT_TYPE_GROUP = "group"
CHAT_TYPE_SUPERGROUP = "supergroup"
CHAT_TYPE_CHANNEL = "channel"


@dataclass(frozen=True)
class Chat:
    id: int
    type: Optional[str] = None
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> Optional["Chat"]:
        if not d:
            return None
        kw = {k: d.get(k) for k in ("id", "type", "title", "username", "first_name")}
        extras = {k: v for k, v in d.items() if k not in kw}
        return cls(**kw, extra=extras)
