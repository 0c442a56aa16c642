from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .context import DispatchContext, Handler, Middleware
from .filters import Filter
from .log import get_logger
from .middleware import as_async, build_chain
from .types.update import UpdateKind

logger = get_logger("router")


@dataclass
class Registration:
    """A terminal handler together with the middleware local to its registration."""

    handler: Handler
    middleware: List[Middleware] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._chain = build_chain(self.handler, self.middleware)

    async def handle(self, ctx: DispatchContext) -> None:
        await self._chain(ctx)


def filtered(handler: Callable, flt: Callable) -> Handler:
    """Runs handler only when flt(update) is true; otherwise a successful no-op."""
    target = as_async(handler)

    async def guarded(ctx: DispatchContext) -> None:
        if flt(ctx.update):
            await target(ctx)

    guarded.__name__ = getattr(handler, "__name__", "handler")
    return guarded


class Router:
    """
    Handler registry keyed by update kind.

    Filled during setup and only read once ingestion has started.
    """

    def __init__(self) -> None:
        self._handlers: Dict[UpdateKind, List[Registration]] = {}

    def add(self, kind: UpdateKind, handler: Callable, middleware: Sequence[Middleware] = (),
            filter: Optional[Callable] = None) -> Registration:
        kind = UpdateKind(kind)
        target = filtered(handler, filter) if filter is not None else as_async(handler)
        reg = Registration(target, list(middleware))
        self._handlers.setdefault(kind, []).append(reg)
        logger.debug("Added handler %s for %s (filter=%s)", getattr(handler, "__name__", repr(handler)),
                     kind.value, getattr(filter, "name", None))
        return reg

    def add_command(self, command: str, handler: Callable, middleware: Sequence[Middleware] = ()) -> Registration:
        return self.add(UpdateKind.MESSAGE, handler, middleware, filter=Filter.command(command))

    def handlers_for(self, kind: UpdateKind) -> List[Registration]:
        return list(self._handlers.get(kind, ()))

    @property
    def kinds(self) -> List[UpdateKind]:
        return [k for k, regs in self._handlers.items() if regs]

    async def route(self, ctx: DispatchContext) -> None:
        """Runs the handlers of the update's kind in order; stops at the first failure."""
        for reg in self._handlers.get(ctx.update.kind, ()):
            await reg.handle(ctx)
