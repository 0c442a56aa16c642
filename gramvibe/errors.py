from __future__ import annotations

from typing import Optional

from .types.response import ResponseParameters

_CODE_PREFIXES = {
    400: "bad request for {method}: {description}",
    401: "unauthorized for {method}: {description} (check your bot token)",
    403: "forbidden for {method}: {description}",
    404: "not found for {method}: {description}",
    409: "conflict for {method}: {description}",
    429: "rate limited for {method}: {description}",
}


class BotError(Exception):
    """Base class of everything gramvibe raises."""


class ConfigurationError(BotError):
    """Invalid setup: empty token, bad limits, a transport already running."""


class EncodingError(BotError):
    """An outgoing request could not be encoded; nothing was sent."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"failed to encode field {field}: {message}")


class TransportError(BotError):
    """No structured answer was obtained from the remote service."""

    def __init__(self, method: str, message: str):
        self.method = method
        super().__init__(f"{message} for {method}")


class HandlerTimeout(BotError):
    """A handler chain did not finish before its deadline."""


class APIError(BotError):
    """The remote service answered ok=false."""

    def __init__(self, method: str, code: int, description: str,
                 parameters: Optional[ResponseParameters] = None):
        self.method = method
        self.code = code
        template = _CODE_PREFIXES.get(code, "API error for {method} ({code}): {description}")
        self.description = template.format(method=method, code=code, description=description)
        self.parameters = parameters
        super().__init__(self._message())

    @property
    def retryable(self) -> bool:
        return self.code == 429 or self.code >= 500

    @property
    def retry_after(self) -> int:
        return self.parameters.retry_after if self.parameters else 0

    @property
    def migrate_to_chat_id(self) -> int:
        return self.parameters.migrate_to_chat_id if self.parameters else 0

    def _message(self) -> str:
        base = f"telegram api error {self.code}: {self.description}"
        if self.retry_after > 0:
            return f"{base} (retry after {self.retry_after} seconds)"
        if self.migrate_to_chat_id != 0:
            return f"{base} (migrate to chat id: {self.migrate_to_chat_id})"
        return base


def is_retryable_error(err: BaseException) -> bool:
    return isinstance(err, APIError) and err.retryable


def get_retry_after(err: BaseException) -> int:
    if isinstance(err, APIError):
        return err.retry_after
    return 0
