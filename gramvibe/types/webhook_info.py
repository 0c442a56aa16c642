from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class WebhookInfo:
    url: str
    has_custom_certificate: bool = False
    pending_update_count: int = 0
    ip_address: Optional[str] = None
    last_error_date: Optional[int] = None
    last_error_message: Optional[str] = None
    max_connections: Optional[int] = None
    allowed_updates: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebhookInfo":
        return cls(
            url=d.get("url", ""),
            has_custom_certificate=bool(d.get("has_custom_certificate", False)),
            pending_update_count=int(d.get("pending_update_count") or 0),
            ip_address=d.get("ip_address"),
            last_error_date=d.get("last_error_date"),
            last_error_message=d.get("last_error_message"),
            max_connections=d.get("max_connections"),
            allowed_updates=list(d.get("allowed_updates") or []),
        )
