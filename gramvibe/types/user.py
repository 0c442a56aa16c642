from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class User:
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    is_bot: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> Optional["User"]:
        if not d:
            return None
        kw = {k: d.get(k) for k in ("id", "first_name", "last_name", "username")}
        kw["is_bot"] = bool(d.get("is_bot", False))
        extras = {k: v for k, v in d.items() if k not in kw}
        return cls(**kw, extra=extras)
