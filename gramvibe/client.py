# client.py
"""
gramvibe client - Telegram bot with typed payloads, filters, middleware,
long polling and webhooks.

 - Bot.request / request_sync: one API round trip; request bodies come from
   the encoder in params.py (JSON, or multipart when a field holds an upload)
 - registration: bot.use(mw), @bot.on_message(), @bot.on_command("start"), ...
 - ingestion: await bot.start_polling(PollingConfig(...)) or
   await bot.start_webhook(WebhookConfig(...)); only one at a time
 - every update is dispatched in its own asyncio task; handlers can be sync or async

Example:
    bot = Bot(os.environ["GRAMVIBE_TOKEN"])

    @bot.on_command("start")
    async def start(ctx):
        msg = ctx.update.message
        await ctx.bot.send_message(SendMessageParams(chat_id=msg.chat.id, text="hi"))

    asyncio.run(bot.start_polling())
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional, Set

import requests

from . import __version__
from .config import DEFAULT_API_URL, DEFAULT_RETRY_DELAY, DEFAULT_TIMEOUT, BotConfig, PollingConfig, WebhookConfig
from .context import DispatchContext, Middleware
from .errors import APIError, ConfigurationError, TransportError
from .log import get_logger
from .methods import (
    DeleteWebhookParams,
    GetUpdatesParams,
    SendDiceParams,
    SendMessageParams,
    SendPhotoParams,
    SetWebhookParams,
)
from .middleware import build_chain
from .params import encode_params
from .polling import Poller
from .router import Router
from .types.message import Message
from .types.response import ResponseEnvelope
from .types.update import Update, UpdateKind
from .types.user import User
from .types.webhook_info import WebhookInfo
from .webhook import get_webhook_router, serve_webhook

logger = get_logger("client")

# long-poll calls get this much slack on top of their server-side wait
_POLL_TIMEOUT_SLACK = 10


def _list_of(convert: Callable[[Any], Any]) -> Callable[[Any], List[Any]]:
    def parse(items: Any) -> List[Any]:
        if not isinstance(items, list):
            raise ValueError(f"expected a list, got {type(items).__name__}")
        return [convert(item) for item in items]
    return parse


class Bot:
    """Main gramvibe client: transport, handler registry, dispatch and run lifecycle."""

    def __init__(self, token: str, base_url: str = DEFAULT_API_URL, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None, retry_delay: float = DEFAULT_RETRY_DELAY):
        if not token:
            raise ConfigurationError("bot token cannot be empty")
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/bot{token}/"
        self.timeout = timeout
        self.retry_delay = retry_delay
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": f"gramvibe/{__version__}"})
        self.router = Router()
        self._middleware: List[Middleware] = []
        # run state
        self._running = False
        self._mode: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._poller: Optional[Poller] = None
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: BotConfig, session: Optional[requests.Session] = None) -> "Bot":
        return cls(config.token, base_url=config.base_url, timeout=config.timeout,
                   session=session, retry_delay=config.retry_delay)

    # ----------------------------
    # transport
    # ----------------------------
    def request_sync(self, method: str, params: Any = None, result_type: Optional[Callable[[Any], Any]] = None,
                     timeout: Optional[float] = None) -> Any:
        """
        One blocking round trip.

        Raises EncodingError before anything is sent, TransportError when no
        structured answer could be obtained, APIError when the service
        answered ok=false. An absent result is returned as None.
        """
        encoded = encode_params(params)
        url = self.api_url + method
        headers = {"Content-Type": encoded.content_type} if encoded.body is not None else {}
        try:
            r = self._session.post(url, data=encoded.body, headers=headers, timeout=timeout or self.timeout)
        except (requests.RequestException, OSError) as e:
            raise TransportError(method, f"failed to execute request: {e}") from e
        try:
            envelope = ResponseEnvelope.from_dict(r.json())
        except ValueError as e:
            raise TransportError(method, f"failed to parse response ({r.status_code}): {r.text[:500]!r}") from e
        if not envelope.ok:
            err = APIError(method, envelope.error_code, envelope.description, envelope.parameters)
            logger.warning("API error %s: %s", method, err)
            raise err
        if result_type is None or envelope.result is None:
            return envelope.result
        try:
            return result_type(envelope.result)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise TransportError(method, f"failed to parse result: {e}") from e

    async def request(self, method: str, params: Any = None, result_type: Optional[Callable[[Any], Any]] = None,
                      timeout: Optional[float] = None) -> Any:
        """Async form of request_sync; the blocking call runs in a worker thread."""
        return await asyncio.to_thread(self.request_sync, method, params, result_type, timeout)

    # ----------------------------
    # API methods
    # ----------------------------
    async def get_me(self) -> User:
        return await self.request("getMe", result_type=User.from_dict)

    async def get_updates(self, params: GetUpdatesParams) -> List[Update]:
        timeout = max(self.timeout, params.timeout + _POLL_TIMEOUT_SLACK)
        updates = await self.request("getUpdates", params, result_type=_list_of(Update.from_dict), timeout=timeout)
        return updates or []

    async def send_message(self, params: SendMessageParams) -> Message:
        return await self.request("sendMessage", params, result_type=Message.from_dict)

    async def send_photo(self, params: SendPhotoParams) -> Message:
        return await self.request("sendPhoto", params, result_type=Message.from_dict)

    async def send_dice(self, params: SendDiceParams) -> Message:
        return await self.request("sendDice", params, result_type=Message.from_dict)

    async def set_webhook(self, params: SetWebhookParams) -> bool:
        return bool(await self.request("setWebhook", params))

    async def delete_webhook(self, drop_pending_updates: bool = False) -> bool:
        return bool(await self.request("deleteWebhook", DeleteWebhookParams(drop_pending_updates)))

    async def get_webhook_info(self) -> WebhookInfo:
        return await self.request("getWebhookInfo", result_type=WebhookInfo.from_dict)

    # ----------------------------
    # Handler registration API
    # ----------------------------
    def use(self, *middleware: Middleware) -> None:
        """Bot-level middleware, applied around routing for every update."""
        self._middleware.extend(middleware)

    def add_handler(self, kind: UpdateKind, fn: Callable, *middleware: Middleware,
                    filter: Optional[Callable] = None) -> Callable:
        self.router.add(kind, fn, middleware, filter=filter)
        return fn

    def on(self, kind: UpdateKind, *middleware: Middleware, filter: Optional[Callable] = None):
        """Decorator: @bot.on(UpdateKind.MESSAGE, filter=filters.private_chat)"""
        def deco(fn: Callable):
            return self.add_handler(kind, fn, *middleware, filter=filter)
        return deco

    def on_message(self, *middleware: Middleware, filter: Optional[Callable] = None):
        return self.on(UpdateKind.MESSAGE, *middleware, filter=filter)

    def on_edited_message(self, *middleware: Middleware, filter: Optional[Callable] = None):
        return self.on(UpdateKind.EDITED_MESSAGE, *middleware, filter=filter)

    def on_channel_post(self, *middleware: Middleware, filter: Optional[Callable] = None):
        return self.on(UpdateKind.CHANNEL_POST, *middleware, filter=filter)

    def on_callback_query(self, *middleware: Middleware, filter: Optional[Callable] = None):
        return self.on(UpdateKind.CALLBACK_QUERY, *middleware, filter=filter)

    def on_inline_query(self, *middleware: Middleware, filter: Optional[Callable] = None):
        return self.on(UpdateKind.INLINE_QUERY, *middleware, filter=filter)

    def on_other(self, *middleware: Middleware, filter: Optional[Callable] = None):
        return self.on(UpdateKind.OTHER, *middleware, filter=filter)

    def add_command(self, command: str, fn: Callable, *middleware: Middleware) -> Callable:
        self.router.add_command(command, fn, middleware)
        return fn

    def on_command(self, command: str, *middleware: Middleware):
        """Decorator: @bot.on_command("start") - message handler gated by the command filter."""
        def deco(fn: Callable):
            return self.add_command(command, fn, *middleware)
        return deco

    # ----------------------------
    # Dispatch
    # ----------------------------
    async def handle_update(self, update: Update) -> None:
        """Run one update through bot-level middleware and the router; failures are logged, not raised."""
        ctx = DispatchContext(self, update)
        handler = build_chain(self.router.route, self._middleware)
        try:
            await handler(ctx)
        except Exception:
            logger.exception("Handler error for update #%s", update.update_id)

    def dispatch(self, update: Update) -> asyncio.Task:
        """
        Schedule handle_update() without waiting for it.

        Tasks are never cancelled by stop(); they run to completion. The
        start_* coroutines drain them before returning (bounded by the
        config drain_timeout), and drain() waits for them on demand.
        """
        task = asyncio.get_running_loop().create_task(self.handle_update(update))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending_dispatches(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    async def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight dispatches; True when none is left running."""
        pending = {t for t in self._tasks if not t.done()}
        if not pending:
            return True
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        return not still_running

    # ----------------------------
    # Run lifecycle
    # ----------------------------
    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def offset(self) -> int:
        """Cursor of the current (or last) polling session."""
        return self._poller.offset if self._poller else 0

    def _begin(self, mode: str) -> asyncio.Event:
        if self._running:
            raise ConfigurationError(f"bot is already running ({self._mode}); cannot start {mode}")
        self._running = True
        self._mode = mode
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        return self._stop_event

    @property
    def stopping(self) -> bool:
        """True once stop() has been signalled for the current run."""
        return self._stop_event is not None and self._stop_event.is_set()

    async def _drain_on_stop(self, timeout: Optional[float]) -> None:
        pending = self.pending_dispatches
        if not pending:
            return
        logger.info("Waiting for %s in-flight dispatches", pending)
        if not await self.drain(timeout):
            logger.warning("%s dispatches still running after %ss", self.pending_dispatches, timeout)

    def _finish(self) -> None:
        self._running = False
        self._mode = None
        self._stop_event = None

    async def start_polling(self, config: Optional[PollingConfig] = None) -> None:
        """Long-poll until stop() or cancellation, then wait for in-flight dispatches."""
        config = config or PollingConfig()
        config.validate()
        stop = self._begin("polling")
        try:
            self._poller = Poller(self, config)
            await self._poller.run(stop)
        finally:
            try:
                await self._drain_on_stop(config.drain_timeout)
            finally:
                self._finish()

    async def start_webhook(self, config: WebhookConfig) -> None:
        """Register the webhook remotely, then serve it until stop() or cancellation."""
        config.validate()
        stop = self._begin("webhook")
        try:
            await self.set_webhook(SetWebhookParams(
                url=config.url,
                ip_address=config.ip_address,
                max_connections=config.max_connections,
                allowed_updates=list(config.allowed_updates or []),
                drop_pending_updates=config.drop_pending_updates,
                secret_token=config.secret_token,
            ))
            await serve_webhook(self, config, stop)
        finally:
            try:
                await self._drain_on_stop(config.drain_timeout)
            finally:
                self._finish()

    def webhook_router(self, path: str = "/", secret_token: str = ""):
        """FastAPI router for mounting the webhook endpoint in an existing app."""
        return get_webhook_router(self, path, secret_token)

    def stop(self) -> None:
        """Signal the running transport to stop. Idempotent; safe from any thread."""
        if not self._running or self._stop_event is None or self._loop is None:
            return
        event = self._stop_event
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        if current is self._loop:
            event.set()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(event.set)

    def close(self) -> None:
        try:
            self.stop()
        finally:
            self._session.close()
