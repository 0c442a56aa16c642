from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .user import User


@dataclass(frozen=True)
class InlineQuery:
    id: str
    from_user: Optional[User]
    query: str = ""
    offset: str = ""
    chat_type: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> Optional["InlineQuery"]:
        if not d:
            return None
        return cls(
            id=d.get("id"),
            from_user=User.from_dict(d.get("from")),
            query=d.get("query") or "",
            offset=d.get("offset") or "",
            chat_type=d.get("chat_type"),
            raw=d,
        )
