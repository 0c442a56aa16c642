"""
Webhook endpoint.

Provides a FastAPI router that accepts pushed updates, plus the uvicorn
server wrapper used when the bot owns the listener.
"""

from __future__ import annotations

import asyncio
import hmac
import json
from typing import TYPE_CHECKING

import uvicorn
from fastapi import APIRouter, FastAPI, Request, Response

from .config import WebhookConfig
from .errors import ConfigurationError
from .log import get_logger
from .types.update import Update

if TYPE_CHECKING:
    from .client import Bot

logger = get_logger("webhook")

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def get_webhook_router(bot: "Bot", path: str = "/", secret_token: str = "") -> APIRouter:
    """
    Create a FastAPI router for pushed updates.

    Replies 401 on a secret mismatch, 400 on an unparsable body, and 200 as
    soon as a valid update has been handed to the dispatcher; the sender is
    never kept waiting for handlers.

    Usage:
        app = FastAPI()
        app.include_router(get_webhook_router(bot, "/webhook/telegram", secret))
    """
    router = APIRouter(tags=["telegram"])

    @router.post(path)
    async def receive_update(request: Request) -> Response:
        if secret_token:
            header = request.headers.get(SECRET_HEADER)
            if not header or not hmac.compare_digest(header.encode("utf-8"), secret_token.encode("utf-8")):
                logger.warning(
                    "Invalid webhook secret token from %s",
                    request.client.host if request.client else None,
                )
                return Response(status_code=401)

        body = await request.body()
        try:
            update = Update.from_dict(json.loads(body))
        except (ValueError, TypeError, AttributeError, RecursionError) as e:
            logger.warning("Failed to parse webhook update: %s", e)
            return Response(status_code=400)

        logger.debug("Received update #%s (%s)", update.update_id, update.kind.value)
        bot.dispatch(update)
        return Response(status_code=200)

    @router.get(path.rstrip("/") + "/health")
    async def webhook_health() -> dict:
        return {"status": "healthy", "webhook_path": path, "running": bot.is_running}

    return router


def create_webhook_app(bot: "Bot", config: WebhookConfig) -> FastAPI:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    app.include_router(get_webhook_router(bot, config.path, config.secret_token))
    return app


async def serve_webhook(bot: "Bot", config: WebhookConfig, stop: asyncio.Event) -> None:
    """Serve the webhook app until `stop` is set or the server exits by itself."""
    host, port = config.host_port()
    server = uvicorn.Server(uvicorn.Config(create_webhook_app(bot, config), host=host, port=port, log_level="warning"))

    async def run_server() -> None:
        # uvicorn reports startup failures (e.g. port in use) with sys.exit()
        try:
            await server.serve()
        except SystemExit as e:
            raise ConfigurationError(f"webhook server failed to start on {host}:{port} (exit code {e.code})") from e

    serve = asyncio.ensure_future(run_server())
    stopper = asyncio.ensure_future(stop.wait())
    logger.info("Webhook server listening on %s:%s%s", host, port, config.path)
    try:
        await asyncio.wait({serve, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stopper.cancel()
        if not serve.done():
            server.should_exit = True
            await serve
        logger.info("Webhook server stopped")
    # surface a startup failure (e.g. port in use)
    serve.result()
