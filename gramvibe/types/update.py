from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from .callback_query import CallbackQuery
from .inline_query import InlineQuery
from .message import Message


class UpdateKind(str, Enum):
    MESSAGE = "message"
    EDITED_MESSAGE = "edited_message"
    CHANNEL_POST = "channel_post"
    CALLBACK_QUERY = "callback_query"
    INLINE_QUERY = "inline_query"
    OTHER = "other"


# Priority order used when a malformed update carries more than one kind.
_PARSERS = (
    (UpdateKind.MESSAGE, Message.from_dict),
    (UpdateKind.EDITED_MESSAGE, Message.from_dict),
    (UpdateKind.CHANNEL_POST, Message.from_dict),
    (UpdateKind.CALLBACK_QUERY, CallbackQuery.from_dict),
    (UpdateKind.INLINE_QUERY, InlineQuery.from_dict),
)

Payload = Union[Message, CallbackQuery, InlineQuery, Dict[str, Any], None]


@dataclass(frozen=True)
class Update:
    """
    One event delivered by the platform.

    Exactly one kind is populated: `kind` tells which, `payload` holds it.
    Unrecognized kinds are tagged OTHER and keep their raw body in `payload`.
    """

    update_id: int
    kind: UpdateKind
    payload: Payload = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, d: Any) -> "Update":
        if not isinstance(d, dict):
            raise ValueError(f"update must be an object, got {type(d).__name__}")
        update_id = d.get("update_id")
        if isinstance(update_id, bool) or not isinstance(update_id, int):
            raise ValueError("update_id is missing or not an integer")
        for kind, parse in _PARSERS:
            body = d.get(kind.value)
            if body:
                if not isinstance(body, dict):
                    raise ValueError(f"{kind.value} must be an object")
                return cls(update_id=update_id, kind=kind, payload=parse(body), raw=d)
        rest = {k: v for k, v in d.items() if k != "update_id"}
        return cls(update_id=update_id, kind=UpdateKind.OTHER, payload=rest or None, raw=d)

    def _payload_if(self, kind: UpdateKind):
        return self.payload if self.kind is kind else None

    @property
    def message(self) -> Optional[Message]:
        return self._payload_if(UpdateKind.MESSAGE)

    @property
    def edited_message(self) -> Optional[Message]:
        return self._payload_if(UpdateKind.EDITED_MESSAGE)

    @property
    def channel_post(self) -> Optional[Message]:
        return self._payload_if(UpdateKind.CHANNEL_POST)

    @property
    def callback_query(self) -> Optional[CallbackQuery]:
        return self._payload_if(UpdateKind.CALLBACK_QUERY)

    @property
    def inline_query(self) -> Optional[InlineQuery]:
        return self._payload_if(UpdateKind.INLINE_QUERY)

    @property
    def effective_message(self) -> Optional[Message]:
        """The message-like payload of the update, if any."""
        if isinstance(self.payload, Message):
            return self.payload
        if isinstance(self.payload, CallbackQuery):
            return self.payload.message
        return None
