"""Outgoing request types for the remote API methods the bot calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from .fields import param
from .types.input_file import InputFile

ChatID = Union[int, str]


@dataclass
class GetUpdatesParams:
    offset: int = param("offset", omit_empty=True, default=0)
    limit: int = param("limit", omit_empty=True, default=0)
    timeout: int = param("timeout", omit_empty=True, default=0)
    allowed_updates: List[str] = param("allowed_updates", omit_empty=True, default_factory=list)


@dataclass
class SendMessageParams:
    chat_id: ChatID = param("chat_id")
    text: str = param("text")
    parse_mode: str = param("parse_mode", omit_empty=True, default="")
    disable_notification: bool = param("disable_notification", omit_empty=True, default=False)
    protect_content: bool = param("protect_content", omit_empty=True, default=False)
    reply_to_message_id: int = param("reply_to_message_id", omit_empty=True, default=0)
    reply_markup: Any = param("reply_markup", omit_empty=True, default=None)


@dataclass
class SendPhotoParams:
    chat_id: ChatID = param("chat_id")
    photo: InputFile = param("photo")
    caption: str = param("caption", omit_empty=True, default="")
    parse_mode: str = param("parse_mode", omit_empty=True, default="")
    has_spoiler: bool = param("has_spoiler", omit_empty=True, default=False)
    disable_notification: bool = param("disable_notification", omit_empty=True, default=False)
    reply_to_message_id: int = param("reply_to_message_id", omit_empty=True, default=0)
    reply_markup: Any = param("reply_markup", omit_empty=True, default=None)


@dataclass
class SendDiceParams:
    chat_id: ChatID = param("chat_id")
    emoji: str = param("emoji", omit_empty=True, default="")
    disable_notification: bool = param("disable_notification", omit_empty=True, default=False)
    reply_to_message_id: int = param("reply_to_message_id", omit_empty=True, default=0)


@dataclass
class SetWebhookParams:
    url: str = param("url")
    certificate: Optional[InputFile] = param("certificate", omit_empty=True, default=None)
    ip_address: str = param("ip_address", omit_empty=True, default="")
    max_connections: int = param("max_connections", omit_empty=True, default=0)
    allowed_updates: List[str] = param("allowed_updates", omit_empty=True, default_factory=list)
    drop_pending_updates: bool = param("drop_pending_updates", omit_empty=True, default=False)
    secret_token: str = param("secret_token", omit_empty=True, default="")


@dataclass
class DeleteWebhookParams:
    drop_pending_updates: bool = param("drop_pending_updates", omit_empty=True, default=False)
