from __future__ import annotations

from typing import Callable, Optional

from .log import get_logger
from .types.chat import CHAT_TYPE_GROUP, CHAT_TYPE_PRIVATE, CHAT_TYPE_SUPERGROUP
from .types.message_entity import BOT_COMMAND
from .types.update import Update, UpdateKind

logger = get_logger("filters")


# ---- Filter system ----
class Filter:
    """
    Composable predicate over an Update. Filters are callable fun(update) -> bool.
    Combine with & (and), | (or), ~ (not), or Filter.all_of / any_of / not_.
    Use helpers: Filter.command("start"), Filter.text("hi"), Filter.chat_type("group")
    """

    def __init__(self, func: Callable[[Update], bool], name: Optional[str] = None):
        self.func = func
        self.name = name or getattr(func, "__name__", "filter")

    def __call__(self, update: Update) -> bool:
        try:
            return bool(self.func(update))
        except Exception:
            logger.exception("Filter %s raised", self.name)
            return False

    def __and__(self, other: "Filter") -> "Filter":
        return Filter.all_of(self, other)

    def __or__(self, other: "Filter") -> "Filter":
        return Filter.any_of(self, other)

    def __invert__(self) -> "Filter":
        return Filter.not_(self)

    def __repr__(self) -> str:
        return f"Filter({self.name})"

    @staticmethod
    def raw(fn: Callable[[Update], bool]) -> "Filter":
        return Filter(fn, name=getattr(fn, "__name__", "raw_filter"))

    @staticmethod
    def any_of(*filters: Callable[[Update], bool]) -> "Filter":
        names = " | ".join(getattr(f, "name", "filter") for f in filters)
        return Filter(lambda u: any(f(u) for f in filters), name=f"({names})")

    @staticmethod
    def all_of(*filters: Callable[[Update], bool]) -> "Filter":
        names = " & ".join(getattr(f, "name", "filter") for f in filters)
        return Filter(lambda u: all(f(u) for f in filters), name=f"({names})")

    @staticmethod
    def not_(f: Callable[[Update], bool]) -> "Filter":
        return Filter(lambda u: not f(u), name=f"(not {getattr(f, 'name', 'filter')})")

    @staticmethod
    def kind(kind: UpdateKind) -> "Filter":
        return Filter(lambda u: u.kind is kind, name=kind.value)

    @staticmethod
    def command(cmd: str) -> "Filter":
        """
        Matches "/cmd" and "/cmd@botname" when the message starts with a
        bot_command entity at offset 0. Exact, case-sensitive name match.
        """
        cmd = cmd.lstrip("/")

        def _f(u: Update) -> bool:
            msg = u.message
            if msg is None or not msg.text or not msg.entities:
                return False
            entity = msg.entities[0]
            if entity.type != BOT_COMMAND or entity.offset != 0:
                return False
            head = msg.text[:entity.length]
            return head == "/" + cmd or head.startswith("/" + cmd + "@")

        return Filter(_f, name=f"command({cmd})")

    @staticmethod
    def text(value: str) -> "Filter":
        return Filter(lambda u: u.message is not None and u.message.text == value, name=f"text({value})")

    @staticmethod
    def chat_type(t: str) -> "Filter":
        def _f(u: Update) -> bool:
            msg = u.message
            return msg is not None and msg.chat is not None and msg.chat.type == t
        return Filter(_f, name=f"chat_type({t})")


message = Filter.kind(UpdateKind.MESSAGE)
edited_message = Filter.kind(UpdateKind.EDITED_MESSAGE)
channel_post = Filter.kind(UpdateKind.CHANNEL_POST)
callback_query = Filter.kind(UpdateKind.CALLBACK_QUERY)
inline_query = Filter.kind(UpdateKind.INLINE_QUERY)
private_chat = Filter.chat_type(CHAT_TYPE_PRIVATE)
group_chat = Filter.any_of(Filter.chat_type(CHAT_TYPE_GROUP), Filter.chat_type(CHAT_TYPE_SUPERGROUP))
