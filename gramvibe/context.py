from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional

from .types.update import Update

if TYPE_CHECKING:
    from .client import Bot


class DispatchContext:
    """
    Per-update state handed to middleware and handlers.

    Created once per dispatched update and dropped when the chain returns.
    `data` is a scratch bag: earlier middleware set values that later
    middleware and handlers read. `deadline` is an event-loop timestamp
    (loop.time()) or None when the chain runs without one.
    """

    def __init__(self, bot: Optional["Bot"], update: Update, deadline: Optional[float] = None):
        self.bot = bot
        self.update = update
        self.data: Dict[str, Any] = {}
        self.deadline = deadline

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def narrow_deadline(self, seconds: float) -> float:
        """Move the deadline to now + seconds unless an earlier one is already set."""
        candidate = asyncio.get_running_loop().time() + seconds
        if self.deadline is None or candidate < self.deadline:
            self.deadline = candidate
        return self.deadline

    def time_remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - asyncio.get_running_loop().time())

    @property
    def expired(self) -> bool:
        remaining = self.time_remaining()
        return remaining is not None and remaining <= 0

    @property
    def stopping(self) -> bool:
        """True once the owning bot has been asked to stop; long handlers can wind down early."""
        return self.bot is not None and self.bot.stopping

    def __repr__(self) -> str:
        return f"DispatchContext(update_id={self.update.update_id}, kind={self.update.kind.value})"


Handler = Callable[[DispatchContext], Awaitable[None]]
Middleware = Callable[[Handler], Handler]
