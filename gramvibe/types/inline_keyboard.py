from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..fields import param


@dataclass
class InlineKeyboardButton:
    text: str = param("text")
    callback_data: Optional[str] = param("callback_data", omit_empty=True, default=None)
    url: Optional[str] = param("url", omit_empty=True, default=None)


@dataclass
class InlineKeyboardMarkup:
    inline_keyboard: List[List[InlineKeyboardButton]] = param("inline_keyboard", default_factory=list)
