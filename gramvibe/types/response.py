from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ResponseParameters:
    retry_after: int = 0
    migrate_to_chat_id: int = 0

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> Optional["ResponseParameters"]:
        if not d:
            return None
        return cls(
            retry_after=int(d.get("retry_after") or 0),
            migrate_to_chat_id=int(d.get("migrate_to_chat_id") or 0),
        )


@dataclass(frozen=True)
class ResponseEnvelope:
    ok: bool
    result: Any = None
    error_code: int = 0
    description: str = ""
    parameters: Optional[ResponseParameters] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ResponseEnvelope":
        if not isinstance(d, dict) or not isinstance(d.get("ok"), bool):
            raise ValueError("response envelope must be an object with a boolean 'ok'")
        return cls(
            ok=d["ok"],
            result=d.get("result"),
            error_code=int(d.get("error_code") or 0),
            description=d.get("description") or "",
            parameters=ResponseParameters.from_dict(d.get("parameters")),
        )
