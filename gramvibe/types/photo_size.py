from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PhotoSize:
    file_id: str
    file_unique_id: str
    width: int
    height: int
    file_size: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PhotoSize":
        return cls(
            file_id=d.get("file_id", ""),
            file_unique_id=d.get("file_unique_id", ""),
            width=int(d.get("width", 0)),
            height=int(d.get("height", 0)),
            file_size=d.get("file_size"),
        )
