"""gramvibe - Telegram bot client: typed updates, filters, middleware, polling and webhooks."""

__version__ = "0.1.0"

from .log import logger
from .errors import (
    APIError,
    BotError,
    ConfigurationError,
    EncodingError,
    HandlerTimeout,
    TransportError,
    get_retry_after,
    is_retryable_error,
)
from .config import BotConfig, PollingConfig, WebhookConfig
from .context import DispatchContext
from .fields import param
from .filters import Filter
from .middleware import LoggingMiddleware, RateLimitMiddleware, RecoveryMiddleware, TimeoutMiddleware, build_chain
from .methods import (
    DeleteWebhookParams,
    GetUpdatesParams,
    SendDiceParams,
    SendMessageParams,
    SendPhotoParams,
    SetWebhookParams,
)
from .params import encode_params
from .types import (
    CallbackQuery,
    Chat,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InlineQuery,
    InputFile,
    InputFileString,
    InputFileUpload,
    Message,
    MessageEntity,
    PhotoSize,
    ResponseEnvelope,
    ResponseParameters,
    Update,
    UpdateKind,
    User,
    WebhookInfo,
)
from .client import Bot
